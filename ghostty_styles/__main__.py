"""Entry point for `python -m ghostty_styles`."""

import sys


def main():
    from ghostty_styles.app import run_app
    sys.exit(run_app())


if __name__ == "__main__":
    main()
