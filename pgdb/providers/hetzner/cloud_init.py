"""Cloud-init user data for freshly created pgdb hosts."""

from __future__ import annotations

DATA_DIR = "/var/lib/pgdb"


def generate_cloud_init(pgdb_port: int, data_dir: str = DATA_DIR) -> str:
    """Generate the ``#cloud-config`` document passed as server user_data.

    The host gets:
    1. docker.io, enabled and started
    2. the pgdb data directory
    3. ufw enabled with SSH and the pgdbd port open
    """
    return f"""#cloud-config
package_update: true
packages:
  - docker.io
runcmd:
  - systemctl enable docker
  - systemctl start docker
  - mkdir -p {data_dir}
  - chmod 755 {data_dir}
  - ufw --force enable
  - ufw allow 22/tcp
  - ufw allow {pgdb_port}/tcp
"""
