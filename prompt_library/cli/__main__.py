"""
Entry point for CLI module execution.
Allows running: python -m prompt_library.cli
"""
from prompt_library.cli.library_admin import main

if __name__ == '__main__':
    main()
