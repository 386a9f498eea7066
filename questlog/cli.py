import sys
from pathlib import Path

import fncli

from . import db
from .core.errors import QuestlogError


def main():
    db.init()
    fncli.autodiscover(Path(__file__).parent, "questlog")

    argv = ["questlog", *(sys.argv[1:] or ["ls"])]
    try:
        code = fncli.dispatch(argv)
    except QuestlogError as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
