"""Cloud instance discovery, cheapest-option search and provisioning."""

from __future__ import annotations

import getpass
import json
import logging
import re
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from cc_cli import console
from cc_cli.cloud.cache import CACHE_TTL_SECONDS, InstanceCache
from cc_cli.config import service as config_service
from cc_cli.config.models import Provider
from cc_cli.core.pricing import (
    PROVIDER_ORDER,
    InstanceOffer,
    cheapest_offer,
    find_cheapest_for_provider,
)
from cc_cli.core.sizing import ModelRequirements, get_model_requirements
from cc_cli.errors import (
    CcCliError,
    InstanceNotReadyError,
    InvalidInstanceDataError,
    NoInstanceDataError,
    NotAuthenticatedError,
    ProvisioningNotSupportedError,
)
from cc_cli.infra.retry import RetryPolicy
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

PROVIDER_TITLES = {
    "gcp": "Google Cloud Platform (GCP)",
    "azure": "Microsoft Azure",
    "aws": "Amazon Web Services (AWS)",
}

AZURE_LOCATION = "eastus"
AWS_REGION = "us-east-1"
AZURE_TENANT_ONLY = "N/A(tenant level account)"

SSH_POLL_ATTEMPTS = 10
SSH_POLL_INTERVAL = 10.0


class ProviderCompute:
    """Fetches and caches one provider's instance-type listing."""

    name: Provider
    label: str

    def __init__(self, runner: CommandRunner = default_runner, ttl: int = CACHE_TTL_SECONDS):
        self.runner = runner
        self.ttl = ttl

    @property
    def cache(self) -> InstanceCache:
        return InstanceCache(config_service.get_cache_dir() / f"{self.name}_instances.json", self.ttl)

    def list_instances(self) -> Any:
        raise NotImplementedError

    def _run_listing(self, command: list[str]) -> Any:
        result = self.runner.run(command).check()
        try:
            return json.loads(result.stdout or "null")
        except json.JSONDecodeError as exc:
            logger.debug("%s printed: %r", command[0], result.stdout[:200])
            raise InvalidInstanceDataError(self.name, command, str(exc)) from exc

    def fetch(self, force: bool = False) -> Any:
        """Return the instance listing, refreshing the cache when stale.

        Raises:
            NotAuthenticatedError: If the auth status file says we're logged out
            CommandFailedError: If the listing command fails
            InvalidInstanceDataError: If the listing is not JSON
        """
        console.info(f"Fetching {self.label} instance data...")

        if not config_service.is_authenticated(self.name):
            raise NotAuthenticatedError(self.name)

        cache = self.cache
        if not force and cache.is_valid():
            try:
                data = cache.read()
            except ValueError as exc:
                logger.warning("Discarding %s: %s", cache.path, exc)
                console.warn(f"Cached {self.label} data is corrupt.")
                cache.path.unlink()
            else:
                console.success(f"Using cached {self.label} data.")
                return data

        console.warn(f"Refreshing {self.label} instance data...")
        data = self.list_instances()
        cache.write(data)
        console.success(f"{self.label} data refreshed.")
        return data


class GcpCompute(ProviderCompute):
    name: Provider = "gcp"
    label = "GCP"

    def list_instances(self) -> Any:
        console.warn("Fetching GPU machine types...")
        data = self._run_listing(
            [
                "gcloud", "compute", "machine-types", "list",
                "--filter=name:(g2-standard OR a2-highgpu OR n1-standard)",
                "--format=json",
            ]
        )
        return [] if data is None else data


class AzureCompute(ProviderCompute):
    name: Provider = "azure"
    label = "Azure"

    def _has_subscription(self) -> bool:
        result = self.runner.run(["az", "account", "list", "--query", "[0].name", "-o", "tsv"])
        account = result.stdout.strip()
        return result.ok and bool(account) and account != AZURE_TENANT_ONLY

    def list_instances(self) -> Any:
        if not self._has_subscription():
            console.warn("Only tenant-level Azure account detected. Using default VM size data.")
            return []

        console.warn("Fetching GPU VM sizes...")
        result = self.runner.run(
            [
                "az", "vm", "list-sizes",
                "--location", AZURE_LOCATION,
                "--query", "[?contains(name, 'Standard_N')] | [?numberOfCores >= `2`]",
                "--output", "json",
            ]
        )
        if not result.ok:
            console.error("Error fetching Azure VM sizes. Using default VM size data.")
            logger.warning("az vm list-sizes failed: %s", result.stderr.strip())
            return []
        try:
            return json.loads(result.stdout or "[]")
        except json.JSONDecodeError:
            logger.warning("az vm list-sizes returned invalid JSON")
            return []


class AwsCompute(ProviderCompute):
    name: Provider = "aws"
    label = "AWS"

    def list_instances(self) -> Any:
        console.warn("Fetching EC2 instance types...")
        data = self._run_listing(
            [
                "aws", "ec2", "describe-instance-types",
                "--region", AWS_REGION,
                "--filters", "Name=instance-type,Values=m6i.*,g4dn.*,g5.*,g6.*,p4d.*",
                "--output", "json",
            ]
        )
        if isinstance(data, dict):
            return data.get("InstanceTypes", [])
        return [] if data is None else data


COMPUTE_PROVIDERS: Dict[str, type[ProviderCompute]] = {
    "gcp": GcpCompute,
    "azure": AzureCompute,
    "aws": AwsCompute,
}


def get_compute(provider: str, runner: CommandRunner = default_runner) -> ProviderCompute:
    try:
        return COMPUTE_PROVIDERS[provider](runner=runner)
    except KeyError:
        raise ValueError(f"Unknown provider: {provider}") from None


def fetch_instances(
    providers: Iterable[str] = PROVIDER_ORDER,
    runner: CommandRunner = default_runner,
    force: bool = False,
) -> Dict[str, Optional[CcCliError]]:
    """Refresh every provider's cache, collecting failures instead of stopping.

    Returns:
        Mapping of provider to the error it raised, or None on success
    """
    outcome: Dict[str, Optional[CcCliError]] = {}
    for provider in providers:
        try:
            get_compute(provider, runner).fetch(force=force)
            outcome[provider] = None
        except CcCliError as exc:
            logger.warning("Fetching %s instances failed: %s", provider, exc)
            console.error(str(exc))
            if exc.hint:
                console.warn(exc.hint)
            outcome[provider] = exc
    return outcome


@dataclass(slots=True)
class CheapestResult:
    """Per-provider picks and the overall cheapest offer."""

    model: str
    requirements: ModelRequirements
    offers: Dict[str, InstanceOffer] = field(default_factory=dict)

    @property
    def best(self) -> InstanceOffer:
        return cheapest_offer(list(self.offers.values()))


def find_cheapest(
    model: str,
    performance: str = "standard",
    providers: Iterable[str] = PROVIDER_ORDER,
    offline: bool = False,
    quantization: Optional[str] = None,
    runner: CommandRunner = default_runner,
) -> CheapestResult:
    """Find the cheapest instance that can run ``model``.

    Args:
        model: Catalog model name
        performance: basic, standard or optimal
        providers: Providers to consider
        offline: Price against the built-in tables without fetching listings
        quantization: Override the model's quantization
        runner: Command runner for the vendor CLIs

    Raises:
        UnknownModelError: If the model isn't in the catalog
        InvalidPerformanceLevelError: If the performance level is invalid
        NoInstanceDataError: If no provider has instance data
    """
    requirements = get_model_requirements(model, performance, quantization)
    candidates = [p for p in PROVIDER_ORDER if p in set(providers)]

    if not offline:
        fetch_instances(candidates, runner)
        candidates = [p for p in candidates if get_compute(p, runner).cache.exists()]

    if not candidates:
        raise NoInstanceDataError(
            "No cloud instance data available.",
            "Run 'cc login' and 'cc-cloud fetch-instances', or pass --offline "
            "to use the built-in price tables.",
        )

    result = CheapestResult(model=model, requirements=requirements)
    for provider in candidates:
        result.offers[provider] = find_cheapest_for_provider(provider, requirements)
    logger.info("Cheapest offer for %s/%s: %s", model, performance, result.best)
    return result


def instance_name(model: str, performance: str, epoch: int) -> str:
    """GCE-compatible instance name, e.g. ``cc-cc-r1-8b-standard-1700000000``."""
    raw = f"cc-{model}-{performance}-{epoch}".lower()
    return re.sub(r"[^a-z0-9-]", "-", raw)


def build_startup_script(
    model: str,
    performance: str,
    offer: InstanceOffer,
    provisioned_at: datetime,
) -> str:
    """Boot script that installs Docker and Ollama and pulls the model."""
    return f"""#!/bin/bash
apt-get update
apt-get install -y docker.io curl
curl -fsSL https://ollama.com/install.sh | sh
ollama pull {model}

mkdir -p /opt/cc-cli
cat > /opt/cc-cli/instance-info.txt <<EOL
Model: {model}
Performance tier: {performance}
Instance type: {offer.name}
Provider: {offer.provider}
Date provisioned: {provisioned_at.isoformat(timespec="seconds")}
EOL
"""


@dataclass(slots=True)
class ProvisionResult:
    name: str
    offer: InstanceOffer
    ready: bool
    connect_command: str
    delete_command: str


class GcpProvisioner:
    """Creates a GCE instance and waits for SSH."""

    def __init__(
        self,
        runner: CommandRunner = default_runner,
        ssh_dir: Optional[Path] = None,
        poll_policy: Optional[RetryPolicy] = None,
    ):
        self.runner = runner
        self.ssh_dir = ssh_dir or Path.home() / ".ssh"
        self.poll_policy = poll_policy or RetryPolicy(
            max_retries=SSH_POLL_ATTEMPTS - 1,
            base_delay=SSH_POLL_INTERVAL,
            exponential_base=1.0,
            retry_on=(InstanceNotReadyError,),
        )

    def _project_has_ssh_keys(self) -> bool:
        result = self.runner.run(
            ["gcloud", "compute", "project-info", "describe", "--format=json"]
        ).check()
        try:
            info = json.loads(result.stdout or "{}")
        except json.JSONDecodeError:
            logger.warning("Could not parse project metadata")
            return False
        items = info.get("commonInstanceMetadata", {}).get("items", []) or []
        return any(item.get("key") == "ssh-keys" and item.get("value") for item in items)

    def ensure_ssh_key(self) -> None:
        console.warn("Checking for SSH keys...")
        if self._project_has_ssh_keys():
            console.success("SSH keys found in project metadata.")
            return

        console.warn("No SSH keys found in project metadata. Adding your SSH key...")
        private_key = self.ssh_dir / "id_rsa"
        public_key = self.ssh_dir / "id_rsa.pub"
        if not public_key.exists():
            console.warn("No SSH key found. Generating one...")
            self.ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            self.runner.run(
                ["ssh-keygen", "-t", "rsa", "-b", "4096", "-f", str(private_key), "-N", ""]
            ).check()

        entry = f"{getpass.getuser()}:{public_key.read_text(encoding='utf-8').strip()}\n"
        with tempfile.NamedTemporaryFile("w", suffix=".pub", delete=False, encoding="utf-8") as f:
            f.write(entry)
            keys_file = f.name
        try:
            self.runner.run(
                [
                    "gcloud", "compute", "project-info", "add-metadata",
                    f"--metadata-from-file=ssh-keys={keys_file}",
                ]
            ).check()
        finally:
            Path(keys_file).unlink(missing_ok=True)

    def create_instance(self, name: str, offer: InstanceOffer, startup_script: str) -> None:
        with tempfile.NamedTemporaryFile("w", suffix=".sh", delete=False, encoding="utf-8") as f:
            f.write(startup_script)
            script_file = f.name
        args = [
            "gcloud", "compute", "instances", "create", name,
            f"--machine-type={offer.request_type}",
            f"--zone={offer.location}",
            "--image-family=ubuntu-2004-lts",
            "--image-project=ubuntu-os-cloud",
            f"--metadata-from-file=startup-script={script_file}",
            "--boot-disk-size=50GB",
        ]
        if offer.accelerator:
            args += [f"--accelerator=type={offer.accelerator},count=1", "--maintenance-policy=TERMINATE"]
        console.info(f"Creating instance {name}...")
        try:
            self.runner.run(args).check()
        finally:
            Path(script_file).unlink(missing_ok=True)

    def wait_until_ready(self, name: str, zone: str) -> bool:
        console.warn("Waiting for instance to be ready...")
        attempts = {"n": 0}

        def check_ssh() -> None:
            attempts["n"] += 1
            console.echo(f"Checking if instance is ready... (attempt {attempts['n']})")
            result = self.runner.run(
                [
                    "gcloud", "compute", "ssh", name, f"--zone={zone}",
                    "--command=echo 'SSH connection successful'",
                    "--", "-o", "StrictHostKeyChecking=no",
                ]
            )
            if not result.ok:
                raise InstanceNotReadyError(f"{name} is not accepting SSH yet")

        try:
            self.poll_policy(check_ssh)()
        except InstanceNotReadyError:
            return False
        return True

    def provision(self, name: str, offer: InstanceOffer, startup_script: str) -> ProvisionResult:
        if not config_service.is_authenticated("gcp"):
            raise NotAuthenticatedError("gcp")

        console.info(f"Provisioning GCP instance: {offer.name} in zone {offer.location}")
        self.ensure_ssh_key()
        self.create_instance(name, offer, startup_script)
        ready = self.wait_until_ready(name, offer.location)
        return ProvisionResult(
            name=name,
            offer=offer,
            ready=ready,
            connect_command=f"gcloud compute ssh {name} --zone={offer.location}",
            delete_command=f"gcloud compute instances delete {name} --zone={offer.location}",
        )


def provision_instance(
    model: str,
    performance: str,
    offer: InstanceOffer,
    runner: CommandRunner = default_runner,
    clock: Callable[[], float] = time.time,
    provisioner: Optional[GcpProvisioner] = None,
) -> ProvisionResult:
    """Provision ``offer`` for ``model``.

    Raises:
        ProvisioningNotSupportedError: For providers other than GCP
        NotAuthenticatedError: If not logged in to GCP
        CommandFailedError: If a gcloud step fails
    """
    if offer.provider != "gcp":
        raise ProvisioningNotSupportedError(offer.provider)

    now = clock()
    name = instance_name(model, performance, int(now))
    script = build_startup_script(model, performance, offer, datetime.fromtimestamp(now))
    gcp = provisioner or GcpProvisioner(runner=runner)
    return gcp.provision(name, offer, script)
