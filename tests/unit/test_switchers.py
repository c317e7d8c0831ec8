"""
Unit tests for the bundled service switchers. External tools are replaced
with recorders so no cloud CLI is needed.
"""
import pytest
from devenv.MODELS.service_config import (
    AWSConfig,
    AzureConfig,
    DockerConfig,
    GCPConfig,
    KubernetesConfig,
    SSHConfig,
)
from devenv.SWITCHERS import aws, azure, docker, gcp, kubernetes
from devenv.SWITCHERS.ssh import DEFAULT_CONFIG, SSHSwitcher
from devenv.UTILS.cancellation import SwitchContext
from devenv.UTILS.command import CommandError, read_tool, run_tool
from devenv.errors import SwitchCancelledError


@pytest.fixture
def ctx():
    return SwitchContext()


@pytest.fixture
def tools(monkeypatch):
    """
    Patches run_tool/read_tool in every CLI-backed switcher module.
    ``calls`` collects run_tool argument lists; ``outputs`` maps a joined
    command line to what read_tool returns.
    """
    class Tools:
        calls = []
        outputs = {}

    def fake_run(ctx, args):
        Tools.calls.append(args)
        return ""

    def fake_read(ctx, args):
        return Tools.outputs.get(" ".join(args), "")

    for module in (aws, azure, docker, gcp, kubernetes):
        monkeypatch.setattr(module, "run_tool", fake_run)
        monkeypatch.setattr(module, "read_tool", fake_read)
    Tools.calls = []
    Tools.outputs = {}
    return Tools


class TestAWSSwitcher:

    def test_switch_profile_and_region(self, tools, ctx):
        aws.AWSSwitcher().switch(ctx, AWSConfig(profile="dev", region="eu-west-1"))
        assert tools.calls == [
            ["aws", "configure", "set", "profile", "dev"],
            ["aws", "configure", "set", "region", "eu-west-1", "--profile", "dev"],
        ]

    def test_empty_fields_skipped(self, tools, ctx):
        aws.AWSSwitcher().switch(ctx, AWSConfig(region="us-east-1"))
        assert tools.calls == [["aws", "configure", "set", "region", "us-east-1"]]

    def test_current_state(self, tools, ctx):
        tools.outputs = {
            "aws configure get profile": "prod",
            "aws configure get region": "us-east-2",
        }
        state = aws.AWSSwitcher().get_current_state(ctx)
        assert state == AWSConfig(profile="prod", region="us-east-2")

    def test_rollback_reapplies_state(self, tools, ctx):
        aws.AWSSwitcher().rollback(ctx, AWSConfig(profile="prod"))
        assert tools.calls == [["aws", "configure", "set", "profile", "prod"]]

    def test_rejects_other_variant(self, tools, ctx):
        with pytest.raises(TypeError, match="invalid aws configuration type"):
            aws.AWSSwitcher().switch(ctx, DockerConfig(context="x"))


class TestGCPSwitcher:

    def test_switch_sets_each_property(self, tools, ctx):
        gcp.GCPSwitcher().switch(ctx, GCPConfig(project="p1", account="me@example.com", region="europe-west1"))
        assert tools.calls == [
            ["gcloud", "config", "set", "project", "p1"],
            ["gcloud", "config", "set", "account", "me@example.com"],
            ["gcloud", "config", "set", "compute/region", "europe-west1"],
        ]

    def test_current_state(self, tools, ctx):
        tools.outputs = {"gcloud config get-value project": "p0"}
        assert gcp.GCPSwitcher().get_current_state(ctx) == GCPConfig(project="p0")


class TestAzureSwitcher:

    def test_switch_subscription(self, tools, ctx):
        azure.AzureSwitcher().switch(ctx, AzureConfig(subscription="sub-1", tenant="t-1"))
        assert tools.calls == [["az", "account", "set", "--subscription", "sub-1"]]

    def test_current_state(self, tools, ctx):
        tools.outputs = {
            "az account show --query id -o tsv": "sub-0",
            "az account show --query tenantId -o tsv": "t-0",
        }
        assert azure.AzureSwitcher().get_current_state(ctx) == AzureConfig(subscription="sub-0", tenant="t-0")


class TestDockerSwitcher:

    def test_switch_context(self, tools, ctx):
        docker.DockerSwitcher().switch(ctx, DockerConfig(context="remote"))
        assert tools.calls == [["docker", "context", "use", "remote"]]

    def test_current_state(self, tools, ctx):
        tools.outputs = {"docker context show": "default"}
        assert docker.DockerSwitcher().get_current_state(ctx) == DockerConfig(context="default")


class TestKubernetesSwitcher:

    def test_switch_context_then_namespace(self, tools, ctx):
        kubernetes.KubernetesSwitcher().switch(ctx, KubernetesConfig(context="staging", namespace="apps"))
        assert tools.calls == [
            ["kubectl", "config", "use-context", "staging"],
            ["kubectl", "config", "set-context", "--current", "--namespace", "apps"],
        ]

    def test_current_state(self, tools, ctx):
        tools.outputs = {
            "kubectl config current-context": "prod",
            "kubectl config view --minify --output jsonpath={..namespace}": "default",
        }
        state = kubernetes.KubernetesSwitcher().get_current_state(ctx)
        assert state == KubernetesConfig(context="prod", namespace="default")


class TestSSHSwitcher:

    def test_state_defaults_without_file(self, tmp_path, ctx):
        switcher = SSHSwitcher(state_file=str(tmp_path / "ssh_active"))
        assert switcher.get_current_state(ctx) == SSHConfig(config=DEFAULT_CONFIG)

    def test_switch_records_resolved_path(self, tmp_path, ctx):
        config = tmp_path / "work_config"
        config.write_text("Host *\n")
        state_file = tmp_path / "state" / "ssh_active"
        switcher = SSHSwitcher(state_file=str(state_file))

        switcher.switch(ctx, SSHConfig(config=str(config)))

        assert state_file.read_text() == f"{config.resolve()}\n"
        assert switcher.get_current_state(ctx) == SSHConfig(config=str(config.resolve()))

    def test_missing_config_file(self, tmp_path, ctx):
        switcher = SSHSwitcher(state_file=str(tmp_path / "ssh_active"))
        with pytest.raises(FileNotFoundError):
            switcher.switch(ctx, SSHConfig(config=str(tmp_path / "absent")))
        assert not (tmp_path / "ssh_active").exists()

    def test_rollback_to_default(self, tmp_path, ctx):
        config = tmp_path / "work_config"
        config.write_text("Host *\n")
        switcher = SSHSwitcher(state_file=str(tmp_path / "ssh_active"))
        previous = switcher.get_current_state(ctx)

        switcher.switch(ctx, SSHConfig(config=str(config)))
        switcher.rollback(ctx, previous)

        assert switcher.get_current_state(ctx) == SSHConfig(config=DEFAULT_CONFIG)

    def test_cancelled_context(self, tmp_path):
        ctx = SwitchContext()
        ctx.cancel()
        switcher = SSHSwitcher(state_file=str(tmp_path / "ssh_active"))
        with pytest.raises(SwitchCancelledError):
            switcher.switch(ctx, SSHConfig(config=DEFAULT_CONFIG))


class TestCommand:

    def test_missing_tool(self, ctx):
        with pytest.raises(CommandError, match="command not found"):
            run_tool(ctx, ["devenv-no-such-tool-xyz"])
        assert read_tool(ctx, ["devenv-no-such-tool-xyz"]) == ""

    def test_cancelled_context_runs_nothing(self):
        ctx = SwitchContext()
        ctx.cancel()
        with pytest.raises(SwitchCancelledError):
            run_tool(ctx, ["devenv-no-such-tool-xyz"])
