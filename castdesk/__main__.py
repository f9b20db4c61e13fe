"""Entry point for ``python -m castdesk <command>``.

Commands:
    config   – show the effective configuration
    demo     – load a YAML seed file into the state file
    show     – print the visible actors of a character's tab
    serve    – run the FastAPI backend with uvicorn
"""
from castdesk.cli import main

if __name__ == "__main__":
    main()
