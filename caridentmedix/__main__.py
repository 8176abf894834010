# caridentmedix/__main__.py

"""Entry point for executing caridentmedix as a module.

This file allows the caridentmedix package to be executed as a script
using `python -m caridentmedix`.
"""

from .main import main

if __name__ == "__main__":
    main()
