"""Allow running apiresource as a module: python -m apiresource."""

from apiresource.cli import main

if __name__ == "__main__":
    main()
