from .manager_cli import run

run()
