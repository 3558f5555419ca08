#!/usr/bin/env python3
"""
Ollama Manager v2.0 - Command Line Interface
Interactive menu by default; flags and subcommands for scripted use
"""

import argparse
import json
import os
import shutil
import sys
from pathlib import Path

from .models.config import SCRIPT_VERSION


def cmd_status(args):
    """Show ollama status"""
    from .models.ollama_client import get_client

    client = get_client()
    print("=" * 50)
    print("OLLAMA STATUS")
    print("=" * 50)

    if not client.is_installed():
        print("❌ Ollama is not installed")
        print("   Run: ollama-manager --quick-setup")
        return 1

    print(f"✅ Ollama installed (v{client.get_version() or 'unknown'})")
    if client.is_available():
        print("✅ Ollama is running")
    else:
        print("❌ Ollama is not running")
        print("   Run: ollama serve")

    models = client.list_models()
    print("\nInstalled models:")
    for m in models:
        print(f"  - {m}")
    if not models:
        print("  None")
    return 0


def cmd_specs(args):
    """Show hardware and performance rating"""
    from .menu import ManagerMenu
    ManagerMenu().show_specs()
    return 0


def cmd_recommend(args):
    """Per-category model suggestions"""
    from .menu import ManagerMenu
    ManagerMenu().suggest_models(args.ram)
    return 0


def cmd_install(args):
    """Install models"""
    from .installer import install_models
    from .recommender import recommended_models
    from .models.resource_monitor import get_monitor

    models = args.models
    if args.recommended:
        models = recommended_models(get_monitor().get_ram_stats().total_gb)
    if not models:
        print("❌ No models given")
        return 1

    results = install_models(models)
    return 0 if all(results.values()) else 1


def cmd_run(args):
    """Run a model interactively"""
    from .models.ollama_client import get_client
    from .settings import get_setting, set_setting
    from .usage_log import log_usage

    model = args.model or get_setting("last_used_model")
    if not model:
        print("❌ No model given and no last used model recorded")
        return 1

    set_setting("last_used_model", model)
    log_usage(f"Switched to model: {model}")
    return get_client().run_model(model)


def cmd_search(args):
    """Search the catalog"""
    from .menu import ManagerMenu
    results = ManagerMenu().search(" ".join(args.term))
    return 0 if results else 1


def cmd_analytics(args):
    """Usage analytics"""
    from .menu import ManagerMenu
    ManagerMenu().usage_analytics()
    return 0


def cmd_backup(args):
    """Create, list or restore backups"""
    from .menu import ManagerMenu

    menu = ManagerMenu()
    if args.action == "create":
        return 0 if menu.create_backup() else 1
    elif args.action == "list":
        menu.list_backups()
    elif args.action == "restore":
        return 0 if menu.restore_backup() else 1
    return 0


def cmd_settings(args):
    """Show or modify preferences"""
    from .settings import init_settings, load_settings, reset_settings, set_setting, parse_value

    init_settings()
    settings = load_settings()

    if args.reset:
        settings = reset_settings()
        print("Settings reset to defaults")

    if args.set:
        if "=" not in args.set:
            print("❌ Use --set key=value")
            return 1
        key, value = args.set.split("=", 1)
        key = key.strip()
        if key not in settings:
            print(f"Unknown setting: {key}")
            print(f"Available: {', '.join(settings.keys())}")
            return 1
        set_setting(key, parse_value(value))
        print(f"Set {key} = {parse_value(value)}")
        return 0

    print("Ollama Manager Settings:")
    print("-" * 40)
    for k, v in settings.items():
        print(f"  {k}: {json.dumps(v)}")
    print("\nModify with: ollama-manager settings --set key=value")
    return 0


def run_flag(args) -> int:
    """Handle the single-action flags"""
    from .menu import ManagerMenu
    from .ui import print_banner
    from .settings import init_settings

    menu = ManagerMenu()
    if args.auto_backup:
        init_settings()
        menu.create_backup()
    elif args.quick_setup:
        print_banner()
        init_settings()
        menu.quick_start()
    elif args.monitor:
        menu.system_monitor()
    elif args.optimize:
        from .optimizer import optimize_system
        optimize_system()
    return 0


def interactive(args) -> int:
    from .menu import ManagerMenu
    from .settings import init_settings, is_first_run
    from .ui import print_banner, print_info

    print_banner()
    first_run = is_first_run()
    init_settings()

    menu = ManagerMenu()
    if first_run:
        print_info("First run detected. Running initial setup...")
        menu.quick_start()

    menu.run()
    return 0


def preflight(interactive_session: bool, input_fn=input) -> bool:
    """Environment checks before doing anything; False aborts"""
    from .ui import confirm, print_warning

    if shutil.which("curl") is None:
        print_warning("curl not found. Ollama installation needs it.")

    if hasattr(os, "geteuid") and os.geteuid() == 0 and interactive_session:
        print_warning("Running as root is not recommended for Ollama operations")
        if not confirm("Continue anyway?", input_fn):
            return False

    (Path.home() / ".ollama").mkdir(parents=True, exist_ok=True)
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-manager",
        description=f"Ollama Manager v{SCRIPT_VERSION} - AI Model Management Suite For OLLAMA",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  ollama-manager                   # Interactive menu
  ollama-manager --quick-setup     # Install ollama and recommended models
  ollama-manager status            # Ollama status and installed models
  ollama-manager specs             # Hardware and performance rating
  ollama-manager recommend         # Suggested models for this machine
  ollama-manager install phi3      # Install a model
  ollama-manager run               # Run the last used model
  ollama-manager search coding     # Search the model catalog
  ollama-manager backup create     # Create a backup
        """
    )

    flags = parser.add_mutually_exclusive_group()
    flags.add_argument("--auto-backup", action="store_true", help="Create automatic backup")
    flags.add_argument("--quick-setup", action="store_true", help="Run quick start setup")
    flags.add_argument("--monitor", action="store_true", help="Start system monitoring")
    flags.add_argument("--optimize", action="store_true", help="Apply system optimizations")
    flags.add_argument("-h", "--help", action="store_true", help="Show the guide")
    flags.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("status", help="Show ollama status")
    subparsers.add_parser("specs", help="Show hardware and rating")

    recommend_parser = subparsers.add_parser("recommend", help="Suggested models")
    recommend_parser.add_argument("--ram", type=int, default=None, help="Override detected RAM (GB)")

    install_parser = subparsers.add_parser("install", help="Install models")
    install_parser.add_argument("models", nargs="*", help="Models to install")
    install_parser.add_argument("--recommended", action="store_true", help="Install the tier defaults")

    run_parser = subparsers.add_parser("run", help="Run a model")
    run_parser.add_argument("model", nargs="?", help="Model name (default: last used)")

    search_parser = subparsers.add_parser("search", help="Search the model catalog")
    search_parser.add_argument("term", nargs="+", help="Search term")

    subparsers.add_parser("analytics", help="Usage analytics")

    backup_parser = subparsers.add_parser("backup", help="Backups")
    backup_parser.add_argument("action", choices=["create", "list", "restore"])

    settings_parser = subparsers.add_parser("settings", help="View/modify settings")
    settings_parser.add_argument("--set", help="Set a setting (key=value)")
    settings_parser.add_argument("--reset", action="store_true", help="Reset to defaults")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Ollama Manager v{SCRIPT_VERSION}")
        return 0
    if args.help:
        from .menu import HELP_TEXT
        parser.print_help()
        print()
        print(HELP_TEXT)
        return 0

    commands = {
        "status": cmd_status,
        "specs": cmd_specs,
        "recommend": cmd_recommend,
        "install": cmd_install,
        "run": cmd_run,
        "search": cmd_search,
        "analytics": cmd_analytics,
        "backup": cmd_backup,
        "settings": cmd_settings,
    }

    from .usage_log import log_usage

    is_flag = args.auto_backup or args.quick_setup or args.monitor or args.optimize
    try:
        if not preflight(interactive_session=not args.auto_backup):
            return 1
        if is_flag:
            return run_flag(args)
        if args.command in commands:
            return commands[args.command](args) or 0
        return interactive(args)
    except KeyboardInterrupt:
        print()
        return 130
    except Exception as e:
        code = 1
        print(f"❌ {e}")
        print(f"❌ Script exited with error code: {code}")
        log_usage(f"Script error: exit code {code}")
        return code


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
