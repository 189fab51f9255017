"""Entry point for 'python -m userstore'."""

from userstore.cli import main

if __name__ == "__main__":
    main()
