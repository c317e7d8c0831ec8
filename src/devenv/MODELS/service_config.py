"""
Per-service configuration variants and the union that selects one of them.
"""
from typing import Dict, Optional, Type
from pydantic import BaseModel, ConfigDict, Field, model_validator


class AWSConfig(BaseModel):
    """
    Target AWS CLI profile and region.
    """
    model_config = ConfigDict(populate_by_name=True)

    profile: str = ""
    region: str = ""
    account_id: str = Field(default="", alias="accountId")


class GCPConfig(BaseModel):
    """
    Target gcloud project, account and compute region.
    """
    project: str = ""
    account: str = ""
    region: str = ""


class AzureConfig(BaseModel):
    """
    Target Azure subscription and tenant.
    """
    subscription: str = ""
    tenant: str = ""


class DockerConfig(BaseModel):
    """
    Target Docker context.
    """
    context: str = ""


class KubernetesConfig(BaseModel):
    """
    Target kubeconfig context and namespace.
    """
    context: str = ""
    namespace: str = ""


class SSHConfig(BaseModel):
    """
    Target SSH configuration file.
    """
    config: str = ""


_VARIANT_FIELDS: Dict[Type[BaseModel], str] = {
    AWSConfig: "aws",
    GCPConfig: "gcp",
    AzureConfig: "azure",
    DockerConfig: "docker",
    KubernetesConfig: "kubernetes",
    SSHConfig: "ssh",
}


class ServiceConfig(BaseModel):
    """
    Configuration entry for one service of an environment.

    At most one variant may be populated. The variant that applies to a
    service is chosen by the switcher registered for it, never by
    inspecting the service name.
    """
    aws: Optional[AWSConfig] = None
    gcp: Optional[GCPConfig] = None
    azure: Optional[AzureConfig] = None
    docker: Optional[DockerConfig] = None
    kubernetes: Optional[KubernetesConfig] = None
    ssh: Optional[SSHConfig] = None

    @model_validator(mode="after")
    def _single_variant(self) -> "ServiceConfig":
        populated = [name for name in _VARIANT_FIELDS.values() if getattr(self, name) is not None]
        if len(populated) > 1:
            raise ValueError(
                f"only one configuration variant may be set per service, got: {', '.join(populated)}"
            )
        return self

    @staticmethod
    def field_for(config_type: Type[BaseModel]) -> Optional[str]:
        """
        Returns the field holding variants of ``config_type``, or None if it is not a variant.
        """
        return _VARIANT_FIELDS.get(config_type)

    def variant(self, field: str) -> Optional[BaseModel]:
        """
        Returns the variant stored under ``field`` if it is populated.
        """
        if field not in _VARIANT_FIELDS.values():
            return None
        return getattr(self, field)
