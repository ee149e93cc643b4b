"""
Settings model: every URL, path and knob the installer uses.

Defaults reproduce the stock node layout, so running without a config
file provisions a standard XrayR host. A YAML file only needs the keys
it wants to change.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

BenchmarkMode = Literal["ask", "yes", "no"]


class Urls(BaseModel):
    """Remote endpoints: installer scripts, rule data, benchmark."""

    xrayr_installer: str = (
        "https://raw.githubusercontent.com/put-go/XrayR-release/refs/heads/master/install.sh"
    )
    xrayr_alpine_installer: str = (
        "https://raw.githubusercontent.com/put-go/alpineXrayR/refs/heads/main/"
        "XrayR_Alpine/install-xrayr.sh"
    )
    gost_installer: str = "https://github.com/go-gost/gost/raw/master/install.sh"
    geosite_mirrors: list[str] = Field(default_factory=lambda: [
        "https://cdn.jsdelivr.net/gh/Loyalsoldier/v2ray-rules-dat@release/geosite.dat",
        "https://github.com/Loyalsoldier/v2ray-rules-dat/releases/latest/download/geosite.dat",
        "https://raw.githubusercontent.com/Loyalsoldier/v2ray-rules-dat/release/geosite.dat",
    ])
    geoip: str = "https://cdn.jsdelivr.net/gh/Loyalsoldier/v2ray-rules-dat@release/geoip.dat"
    rulelist: str = "https://raw.githubusercontent.com/put-go/blockList/main/blockList"
    benchmark: str = "https://raw.githubusercontent.com/sshpc/FastBench/main/FastBench.sh"


class Paths(BaseModel):
    """Filesystem locations read or written by the installer."""

    os_root: Path = Path("/")
    hosts_file: Path = Path("/etc/hosts")
    sysctl_conf: Path = Path("/etc/sysctl.conf")
    xrayr_dir: Path = Path("/etc/XrayR")
    v2bx_dir: Path = Path("/etc/V2bX")
    gost_dir: Path = Path("/etc/gost")
    systemd_dir: Path = Path("/etc/systemd/system")
    gost_binary: Path = Path("/usr/local/bin/gost")
    vimrc: Path = Path("~/.vimrc")
    work_dir: Path = Path(".")

    @property
    def xrayr_config(self) -> Path:
        return self.xrayr_dir / "config.yml"

    @property
    def rulelist(self) -> Path:
        return self.xrayr_dir / "rulelist"

    @property
    def gost_config(self) -> Path:
        return self.gost_dir / "gost.yaml"

    @property
    def gost_unit(self) -> Path:
        return self.systemd_dir / "gost.service"


class Settings(BaseModel):
    """Root installer configuration."""

    urls: Urls = Field(default_factory=Urls)
    paths: Paths = Field(default_factory=Paths)

    packages: list[str] = Field(
        default_factory=lambda: ["curl", "wget", "bc", "vim", "net-tools"]
    )
    # apk also needs bash for the third-party installers
    alpine_packages: list[str] = Field(
        default_factory=lambda: ["curl", "wget", "bc", "bash", "vim", "net-tools"]
    )

    benchmark: BenchmarkMode = "ask"
    config_wait_seconds: float = 2.0
    prompt_timeout: float = 30.0
    download_timeout: int = 60
