"""``python -m capture_script``: same as the ``capture-script`` console script."""

from capture_script.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
