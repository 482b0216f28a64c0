"""Allow running as ``python -m workflowsync``."""

from workflowsync.cli import main

if __name__ == "__main__":
    main()
