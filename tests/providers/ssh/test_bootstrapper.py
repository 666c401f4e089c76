from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from pgdb.config import ConfigStore
from pgdb.core.exceptions import ConfigurationError, RemoteExecutionError
from pgdb.providers.ssh import BootstrapSpec, RemoteBootstrapper, generate_token

pytestmark = [pytest.mark.unit]


@dataclass
class FakeExecutor:
    exit_code: int = 0
    runs: list[tuple[str, str]] = field(default_factory=list)

    async def run_script(self, target: str, script: str) -> int:
        self.runs.append((target, script))
        return self.exit_code


SPEC = BootstrapSpec(host="203.0.113.9", repo_url="https://github.com/example/pgdb.git")


class TestBootstrap:
    async def test_success_records_default_server(self, store: ConfigStore):
        executor = FakeExecutor()
        result = await RemoteBootstrapper(store, executor).bootstrap(SPEC)

        assert result.daemon_url == "http://203.0.113.9:8080"
        assert result.user == "root"
        assert result.service_status == "installed"
        assert store.resolve() == ("default", "http://203.0.113.9:8080")

    async def test_target_and_script(self, store: ConfigStore):
        executor = FakeExecutor()
        spec = BootstrapSpec(
            host="10.0.0.5",
            repo_url="https://github.com/example/pgdb.git",
            user="deploy",
            path="/srv/pgdb",
            pgdb_port=9443,
            public_host="db.example.com",
            token="tok",
        )
        result = await RemoteBootstrapper(store, executor).bootstrap(spec)

        [(target, script)] = executor.runs
        assert target == "deploy@10.0.0.5"
        assert "cd /srv/pgdb" in script
        assert "export PGDB_TOKEN=tok" in script
        assert "export PGDB_PUBLIC_HOST=db.example.com" in script
        assert "export PGDB_LISTEN=:9443" in script
        assert result.daemon_url == "http://db.example.com:9443"

    async def test_generated_token_is_returned_and_sent(self, store: ConfigStore):
        executor = FakeExecutor()
        result = await RemoteBootstrapper(store, executor).bootstrap(SPEC)

        assert len(result.token) == 64
        int(result.token, 16)
        assert f"export PGDB_TOKEN={result.token}" in executor.runs[0][1]
        assert result.next_steps[0] == f"export PGDB_TOKEN={result.token}"

    async def test_next_steps(self, store: ConfigStore):
        result = await RemoteBootstrapper(store, FakeExecutor()).bootstrap(
            BootstrapSpec(host="h", repo_url="r", token="t"),
        )
        assert result.next_steps == (
            "export PGDB_TOKEN=t",
            "pgdb config set server.default http://h:8080",
            "pgdb deploy",
        )

    async def test_failure_leaves_config_untouched(self, store: ConfigStore):
        store.set_default_server("http://old:8080")
        before = store.path.read_bytes()

        with pytest.raises(RemoteExecutionError) as exc:
            await RemoteBootstrapper(store, FakeExecutor(exit_code=2)).bootstrap(SPEC)

        assert exc.value.exit_code == 2
        assert str(exc.value) == "remote bootstrap failed with exit code 2"
        assert store.path.read_bytes() == before

    async def test_failure_without_config_creates_nothing(self, store: ConfigStore):
        with pytest.raises(RemoteExecutionError):
            await RemoteBootstrapper(store, FakeExecutor(exit_code=1)).bootstrap(SPEC)
        assert not store.path.exists()


class TestValidation:
    @pytest.mark.parametrize(
        ("spec", "match"),
        [
            (BootstrapSpec(host="", repo_url="r"), "--host is required"),
            (BootstrapSpec(host="h", repo_url=""), "--repo-url is required"),
            (BootstrapSpec(host="h", repo_url="r", path="opt/pgdb"), "--path must be absolute"),
            (BootstrapSpec(host="h", repo_url="r", pgdb_port=0), "--pgdb-port"),
        ],
    )
    async def test_rejected_before_ssh(self, store: ConfigStore, spec: BootstrapSpec, match: str):
        executor = FakeExecutor()
        with pytest.raises(ConfigurationError, match=match):
            await RemoteBootstrapper(store, executor).bootstrap(spec)
        assert executor.runs == []


def test_generate_token_is_random_hex():
    a, b = generate_token(), generate_token()
    assert a != b
    assert len(a) == 64


class TestCheckedBeforeSsh:
    @pytest.mark.parametrize("content", ["{nope", '{"servers": "x"}'])
    async def test_unreadable_config(self, store: ConfigStore, content: str):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(content)
        executor = FakeExecutor()

        with pytest.raises(ConfigurationError, match=str(store.path)):
            await RemoteBootstrapper(store, executor).bootstrap(SPEC)

        assert executor.runs == []

    async def test_invalid_daemon_url(self, store: ConfigStore):
        executor = FakeExecutor()
        spec = BootstrapSpec(host="h", repo_url="r", public_host="[::1")

        with pytest.raises(ConfigurationError, match="Invalid URL"):
            await RemoteBootstrapper(store, executor).bootstrap(spec)

        assert executor.runs == []
        assert not store.path.exists()

    @pytest.mark.parametrize(
        ("spec", "match"),
        [
            (BootstrapSpec(host="h", repo_url="r", user="-oProxyCommand=touch x"), "--user"),
            (BootstrapSpec(host="-oProxyCommand=touch x", repo_url="r"), "--host"),
        ],
    )
    async def test_dash_prefixed_target(self, store: ConfigStore, spec: BootstrapSpec, match: str):
        executor = FakeExecutor()
        with pytest.raises(ConfigurationError, match=match):
            await RemoteBootstrapper(store, executor).bootstrap(spec)
        assert executor.runs == []
