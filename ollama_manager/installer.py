"""
Ollama Manager Installer
Dependencies, the ollama binary itself, and model downloads.
"""

import shutil
import subprocess
import webbrowser
from typing import Dict, List, Optional

from .models.config import (
    DOWNLOAD_PAGE_URL, LINUX_INSTALL_TARGETS, OPTIONAL_TOOLS, PACKAGE_MANAGERS, REQUIRED_TOOLS,
)
from .models.ollama_client import OllamaClient, get_client
from .models.resource_monitor import get_monitor
from .settings import add_preferred_model, get_setting
from .ui import (
    InputFn, confirm, print_error, print_header, print_info, print_success, print_warning,
)
from .usage_log import log_usage


def missing_tools(tools: List[str]) -> List[str]:
    return [t for t in tools if shutil.which(t) is None]


def install_packages(packages: List[str], os_id: Optional[str] = None) -> bool:
    """Install system packages with the distro's package manager"""
    os_id = os_id or get_monitor().detect_os()
    base = PACKAGE_MANAGERS.get(os_id)

    if base is None:
        print_error(f"Unsupported OS. Please install manually: {' '.join(packages)}")
        return False
    if base[0] == "brew" and shutil.which("brew") is None:
        print_error("Homebrew not found. Please install manually.")
        return False

    try:
        if os_id in ("ubuntu", "debian"):
            subprocess.run(["sudo", "apt", "update"], check=True)
        subprocess.run(base + packages, check=True)
    except (OSError, subprocess.SubprocessError) as e:
        print_error(f"Package installation failed: {e}")
        return False
    return True


def check_dependencies(input_fn: InputFn = input) -> Dict[str, bool]:
    """Report required/optional tools, offering to install missing required ones"""
    print_header("⚙️ Checking Dependencies")

    missing = missing_tools(REQUIRED_TOOLS)
    if missing:
        print_warning(f"Missing required dependencies: {' '.join(missing)}")
        if confirm("Install missing dependencies?", input_fn):
            install_packages(missing)

    print_info("Checking optional tools...")
    status = {}
    for tool in OPTIONAL_TOOLS:
        status[tool] = shutil.which(tool) is not None
        if status[tool]:
            print_success(f"{tool} is available")
        else:
            print(f"  {tool} not found (optional)")
    return status


def install_ollama(client: Optional[OllamaClient] = None, input_fn: InputFn = input) -> bool:
    """Install ollama for the detected OS"""
    client = client or get_client()
    os_id = get_monitor().detect_os()
    print_header("📥 Installing Ollama")

    if os_id in LINUX_INSTALL_TARGETS:
        print("Downloading and installing Ollama...")
        ok = client.run_install_script()
    elif os_id == "macos":
        if confirm("Install via Homebrew? (Alternative: manual download)", input_fn):
            ok = install_packages(["ollama"], os_id)
        else:
            webbrowser.open(DOWNLOAD_PAGE_URL)
            print_info("Please download and install manually, then re-run this program.")
            return False
    else:
        print_error("Unsupported OS. Please install manually: https://ollama.com")
        return False

    if ok:
        print_success("Ollama installed successfully!")
        log_usage("Ollama installed")
    else:
        print_error("Ollama installation failed")
    return ok


def check_ollama_update(client: Optional[OllamaClient] = None, input_fn: InputFn = input) -> bool:
    """Offer (or auto-apply) an update; True when one was applied"""
    client = client or get_client()
    current = client.get_version()
    latest = client.get_latest_version()

    if latest and current != latest:
        print_warning(f"New version available: {latest} (current: {current})")
        if get_setting("auto_update", False) is True or confirm("Update Ollama now?", input_fn):
            print_info("Updating Ollama...")
            if client.run_install_script():
                print_success(f"Updated to version {latest}")
                log_usage(f"Ollama updated to {latest}")
                return True
            print_error("Update failed")
        return False

    print_success(f"Ollama is up to date (v{current})")
    return False


def check_or_install_ollama(client: Optional[OllamaClient] = None, input_fn: InputFn = input) -> bool:
    """Make sure ollama is installed, current and serving"""
    client = client or get_client()

    if not client.is_installed():
        if not install_ollama(client, input_fn):
            return False
    else:
        print_success("Ollama is already installed")
        check_ollama_update(client, input_fn)

    if not client.is_serving():
        print_info("Starting Ollama service...")
        if not client.start_server():
            print_warning("Ollama service did not come up yet")
    return True


def install_model(model: str, client: Optional[OllamaClient] = None) -> bool:
    """Pull a model with progress and record it as preferred"""
    client = client or get_client()
    print_info(f"Installing {model}...")
    log_usage(f"Installing model: {model}")

    client.pull_model(model)

    if client.has_model(model):
        print_success(f"Successfully installed {model}")
        add_preferred_model(model)
        return True

    print_error(f"Failed to install {model}")
    return False


def install_models(models: List[str], client: Optional[OllamaClient] = None) -> Dict[str, bool]:
    client = client or get_client()
    return {m: install_model(m, client) for m in models if m.strip()}
