"""Bootstrap script generation for existing hosts.

The generated script converges: a second run against the same install
path fetches and fast-forwards the checkout instead of cloning again.
"""

from __future__ import annotations

from shlex import quote

SERVICE_NAME = "pgdbd"
INSTALL_ENTRYPOINT = "./scripts/install.sh"
PACKAGES = ("git", "golang-go")


def build_bootstrap_script(
    *,
    repo_url: str,
    path: str,
    token: str,
    public_host: str,
    pgdb_port: int,
) -> str:
    """Return a bash script that installs and starts pgdbd.

    Every interpolated value is shell-quoted.
    """
    p = quote(path)
    git_dir = quote(f"{path.rstrip('/')}/.git")
    return f"""#!/usr/bin/env bash
set -euo pipefail

export DEBIAN_FRONTEND=noninteractive
apt-get update
apt-get install -y {" ".join(PACKAGES)}

if [ -d {git_dir} ]; then
  git -C {p} fetch --all --prune
  git -C {p} pull --ff-only
else
  rm -rf {p}
  git clone {quote(repo_url)} {p}
fi

cd {p}
export PGDB_TOKEN={quote(token)}
export PGDB_PUBLIC_HOST={quote(public_host)}
export PGDB_LISTEN={quote(f":{pgdb_port}")}

sudo -E {INSTALL_ENTRYPOINT}
systemctl is-active --quiet {SERVICE_NAME}
"""
