"""
CLI entry point, when used as a module: `python -m osbind`.

Useful for debugging in the IDEs (use the start-mode "Module", module "osbind").
"""
from osbind import cli

if __name__ == '__main__':
    cli.main()
