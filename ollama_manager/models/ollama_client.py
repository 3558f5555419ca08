"""
Ollama Manager v2.0 - Ollama Client
Wrapper around the ollama binary and its local HTTP API
"""

import re
import shutil
import subprocess
import time
from typing import Callable, List, Optional

import requests

from .config import (
    OLLAMA_HOST, OLLAMA_TIMEOUT, INSTALL_SCRIPT_URL, LATEST_RELEASE_URL,
)

PROGRESS_MARKERS = ("pulling", "verifying", "writing")
SUMMARY_FIELDS = re.compile(r"Parameters|Family|Format")
VERSION_RE = re.compile(r"\d+\.\d+\.\d+")


class OllamaClient:
    """Drives the ollama CLI; the HTTP API is only used for health checks"""

    def __init__(self, binary: str = "ollama", host: str = OLLAMA_HOST):
        self.binary = binary
        self.host = host
        self.timeout = OLLAMA_TIMEOUT

    def _cmd(self, *args: str) -> List[str]:
        return [self.binary, *args]

    def _run(self, *args: str, timeout: Optional[int] = 60) -> Optional[subprocess.CompletedProcess]:
        try:
            return subprocess.run(self._cmd(*args), capture_output=True, text=True, timeout=timeout)
        except (OSError, subprocess.SubprocessError) as e:
            print(f"❌ ollama {' '.join(args)} failed: {e}")
            return None

    def is_installed(self) -> bool:
        """Check if the ollama binary is on PATH"""
        return shutil.which(self.binary) is not None

    def is_available(self) -> bool:
        """Check if the ollama API answers"""
        try:
            r = requests.get(f"{self.host}/api/tags", timeout=self.timeout)
            return r.status_code == 200
        except requests.RequestException:
            return False

    def is_serving(self) -> bool:
        """Check for a running 'ollama serve' process"""
        try:
            result = subprocess.run(
                ["pgrep", "-f", "ollama serve"],
                capture_output=True, timeout=5
            )
            return result.returncode == 0
        except (OSError, subprocess.SubprocessError):
            return self.is_available()

    def start_server(self, wait: float = 3.0) -> bool:
        """Start 'ollama serve' in the background"""
        if self.is_serving():
            return True

        try:
            subprocess.Popen(
                self._cmd("serve"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True
            )
        except OSError as e:
            print(f"❌ Could not start Ollama: {e}")
            return False

        deadline = time.time() + wait
        while time.time() < deadline:
            time.sleep(0.5)
            if self.is_available():
                return True
        return self.is_serving()

    def get_version(self) -> Optional[str]:
        """Installed version, e.g. '0.3.12'"""
        result = self._run("--version", timeout=10)
        if result is None:
            return None
        match = VERSION_RE.search(result.stdout + result.stderr)
        return match.group(0) if match else None

    def get_latest_version(self) -> Optional[str]:
        """Latest release tag on GitHub, without the leading 'v'"""
        try:
            r = requests.get(LATEST_RELEASE_URL, timeout=10)
            if r.status_code != 200:
                return None
            tag = r.json().get("tag_name") or ""
        except (requests.RequestException, ValueError):
            return None
        return tag[1:] if tag.startswith("v") else (tag or None)

    def run_install_script(self) -> bool:
        """Fetch the official install script and pipe it to sh"""
        try:
            r = requests.get(INSTALL_SCRIPT_URL, timeout=60)
            r.raise_for_status()
        except requests.RequestException as e:
            print(f"❌ Failed to download install script: {e}")
            return False

        try:
            result = subprocess.run(["sh"], input=r.text, text=True)
        except (OSError, subprocess.SubprocessError) as e:
            print(f"❌ Install script failed: {e}")
            return False
        return result.returncode == 0

    def list_models(self) -> List[str]:
        """Installed model names, sorted"""
        result = self._run("list", timeout=30)
        if result is None or result.returncode != 0:
            return []

        names = []
        for line in result.stdout.splitlines()[1:]:
            parts = line.split()
            if parts:
                names.append(parts[0])
        return sorted(names)

    def has_model(self, model_name: str) -> bool:
        """True when an installed model name starts with model_name"""
        return any(m.startswith(model_name) for m in self.list_models())

    def pull_model(self, model_name: str, progress_callback: Optional[Callable[[str], None]] = None) -> bool:
        """Download a model, streaming progress lines to the callback"""
        try:
            proc = subprocess.Popen(
                self._cmd("pull", model_name),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            print(f"❌ Failed to pull {model_name}: {e}")
            return False

        # ollama redraws progress with carriage returns
        for chunk in proc.stdout:
            for line in chunk.replace("\r", "\n").split("\n"):
                line = line.strip()
                if line and any(m in line for m in PROGRESS_MARKERS):
                    if progress_callback:
                        progress_callback(line)
                    else:
                        print(f"\r{line}", end="", flush=True)
        proc.wait()
        if progress_callback is None:
            print()
        return proc.returncode == 0

    def run_model(self, model_name: str) -> int:
        """Interactive chat session attached to this terminal"""
        try:
            return subprocess.call(self._cmd("run", model_name))
        except OSError as e:
            print(f"❌ Could not run {model_name}: {e}")
            return 1

    def prompt_model(self, model_name: str, prompt: str, timeout: Optional[int] = None) -> bool:
        """Pipe a single prompt to a model, discarding the answer"""
        try:
            result = subprocess.run(
                self._cmd("run", model_name),
                input=prompt,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            print(f"❌ {model_name} failed: {e}")
            return False
        return result.returncode == 0

    def show_model(self, model_name: str) -> str:
        """Raw 'ollama show' output"""
        result = self._run("show", model_name, timeout=30)
        if result is None or result.returncode != 0:
            return ""
        return result.stdout

    def model_summary(self, model_name: str) -> str:
        """First Parameters/Family/Format line of 'ollama show'"""
        for line in self.show_model(model_name).splitlines():
            if SUMMARY_FIELDS.search(line):
                return line.strip()
        return ""

    def remove_model(self, model_name: str) -> bool:
        result = self._run("rm", model_name, timeout=120)
        return result is not None and result.returncode == 0


# Global instance
_client: Optional[OllamaClient] = None

def get_client() -> OllamaClient:
    """Get global Ollama client instance"""
    global _client
    if _client is None:
        _client = OllamaClient()
    return _client


if __name__ == "__main__":
    client = get_client()
    print(f"Ollama installed: {client.is_installed()}")
    print(f"Ollama available: {client.is_available()}")
    print(f"Version: {client.get_version()}")
