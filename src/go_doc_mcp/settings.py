"""
Toolchain Settings Management

This module resolves the Go environment (GOROOT, GOPATH, module cache, target
platform and build tags) used to locate and filter package sources.
"""
import logging
import os
import platform
import shutil
import subprocess
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .constants import (
    ENV_BUILD_TAGS, ENV_BUILTIN_SOURCE, ENV_GOARCH, ENV_GOMODCACHE, ENV_GOOS,
    ENV_GOPATH, ENV_GOROOT,
)

logger = logging.getLogger(__name__)

_MACHINE_TO_GOARCH = {
    'x86_64': 'amd64',
    'amd64': 'amd64',
    'i386': '386',
    'i686': '386',
    'aarch64': 'arm64',
    'arm64': 'arm64',
    'armv7l': 'arm',
    'ppc64le': 'ppc64le',
    's390x': 's390x',
    'riscv64': 'riscv64',
}


def _host_goos() -> str:
    system = platform.system().lower()
    return system if system else 'linux'


def _host_goarch() -> str:
    return _MACHINE_TO_GOARCH.get(platform.machine().lower(), 'amd64')


def _go_env(name: str) -> str:
    """Ask the ``go`` binary for an environment value, if one is installed."""
    go = shutil.which('go')
    if go is None:
        return ""
    try:
        process = subprocess.run(
            [go, 'env', name],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"go env {name} failed: {e}")
        return ""
    if process.returncode != 0:
        logger.debug(f"go env {name} exited with {process.returncode}: {process.stderr.strip()}")
        return ""
    return process.stdout.strip()


@dataclass
class ToolchainSettings:
    """Go environment used by the package loader."""

    goroot: str = ""
    gopath: List[str] = field(default_factory=list)
    gomodcache: str = ""
    goos: str = field(default_factory=_host_goos)
    goarch: str = field(default_factory=_host_goarch)
    build_tags: List[str] = field(default_factory=list)
    builtin_source: str = ""
    include_tests: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides) -> "ToolchainSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            **overrides: Explicit values that win over the environment

        Returns:
            Resolved ToolchainSettings
        """
        env = os.environ if environ is None else environ

        goroot = env.get(ENV_GOROOT, "")
        if not goroot and environ is None:
            goroot = _go_env(ENV_GOROOT)

        gopath_value = env.get(ENV_GOPATH, "")
        if gopath_value:
            gopath = [p for p in gopath_value.split(os.pathsep) if p]
        else:
            gopath = [os.path.join(os.path.expanduser("~"), "go")]

        gomodcache = env.get(ENV_GOMODCACHE, "")
        if not gomodcache and gopath:
            gomodcache = os.path.join(gopath[0], "pkg", "mod")

        tags = env.get(ENV_BUILD_TAGS, "")

        settings = cls(
            goroot=goroot,
            gopath=gopath,
            gomodcache=gomodcache,
            goos=env.get(ENV_GOOS) or _host_goos(),
            goarch=env.get(ENV_GOARCH) or _host_goarch(),
            build_tags=parse_build_tags(tags),
            builtin_source=env.get(ENV_BUILTIN_SOURCE, ""),
        )
        if overrides:
            settings = replace(settings, **overrides)
        logger.debug(f"Resolved toolchain settings: {settings}")
        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Return settings as a JSON-serialisable dictionary."""
        return {
            "goroot": self.goroot,
            "gopath": list(self.gopath),
            "gomodcache": self.gomodcache,
            "goos": self.goos,
            "goarch": self.goarch,
            "build_tags": list(self.build_tags),
            "builtin_source": self.builtin_source,
            "include_tests": self.include_tests,
        }


def parse_build_tags(value: str) -> List[str]:
    """Split a ``-tags`` value; both comma and space separated lists are accepted."""
    if not value:
        return []
    return [tag for tag in value.replace(',', ' ').split() if tag]
