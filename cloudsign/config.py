# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Configuration for the signing clients.

Configuration is loaded once at startup from a YAML file.  The default
location follows the XDG Base Directory Specification:

    ``$XDG_CONFIG_HOME/cloudsign/cloudsign.yaml``
    (typically ``~/.config/cloudsign/cloudsign.yaml``)

``!env`` tags resolve values from environment variables, so credentials
can stay out of the file::

    aws:
      access_key: !env AWS_ACCESS_KEY_ID
      secret_key: !env AWS_SECRET_ACCESS_KEY
      region: ap-northeast-1
    s3:
      bucket: media-bucket
    ses:
      sender: noreply@example.com
    sns:
      ios_arn: arn:aws:sns:ap-northeast-1:123456789012:app/APNS/ios
      android_arn: arn:aws:sns:ap-northeast-1:123456789012:app/GCM/android
    cloudfront:
      key_pair_id: APKAEXAMPLE
      private_key_path: ~/.config/cloudsign/cloudfront.pem

The resulting ``CloudSignConfig`` is immutable and passed explicitly to
every client; there is no process-wide mutable credential state.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path

from cloudsign.dotenv_loader import load_dotenv_once
from cloudsign.errors import ConfigurationFailure
from cloudsign.logging import SecretFilter


logger = logging.getLogger(__name__)

#: Application name for XDG path resolution.
_APP_NAME = "cloudsign"

#: Region used for SigV4 scopes and service domains.
DEFAULT_REGION = "ap-northeast-1"

#: Transport timeout for every signed request.
DEFAULT_TIMEOUT_SECONDS = 10.0

#: Storage class applied to the destination of an S3 move.
DEFAULT_MOVE_STORAGE_CLASS = "REDUCED_REDUNDANCY"

DEFAULT_SES_ENDPOINT = "https://email.us-east-1.amazonaws.com/"

_BOOL_TRUTHY = frozenset({"true", "1", "yes", "on"})
_BOOL_FALSY = frozenset({"false", "0", "no", "off"})


def get_config_path() -> Path:
    """Return the default config file path (XDG config directory)."""
    return user_config_path(_APP_NAME) / "cloudsign.yaml"


def get_dotenv_path() -> Path:
    """Return the ``.env`` path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


class ConfigError(ConfigurationFailure):
    """Invalid or missing configuration file content."""


# ---------------------------------------------------------------------------
# Credentials and services
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    """Access key pair used by every symmetric and SigV4 signature.

    Attributes:
        access_key: Access key id, sent in clear in headers.
        secret_key: Secret access key, only ever used as HMAC key input.
    """

    access_key: str
    secret_key: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        """True if both halves of the key pair are set."""
        return bool(self.access_key) and bool(self.secret_key)

    def require(self) -> None:
        """Raise if the key pair cannot be used for signing.

        Raises:
            ConfigurationFailure: If either key is empty.
        """
        if not self.is_complete:
            raise ConfigurationFailure("Access key and secret key must be set")


class Service(Enum):
    """Remote services reached through SigV4 signed query requests."""

    SQS = "sqs"
    SNS = "sns"


@dataclass(frozen=True)
class ServiceDescriptor:
    """Per-service signing parameters.

    Attributes:
        name: Service name used in the credential scope (``sqs``).
        domain: Host name, also signed as the ``host`` header.
        api_version: Value of the ``Version`` query parameter.
    """

    name: str
    domain: str
    api_version: str


_API_VERSIONS: dict[Service, str] = {
    Service.SQS: "2012-11-05",
    Service.SNS: "2010-03-31",
}


def service_descriptor(
    service: Service, region: str = DEFAULT_REGION
) -> ServiceDescriptor:
    """Look up the descriptor for a service in a region.

    Args:
        service: Service identifier.
        region: Region the domain is built for.

    Returns:
        ServiceDescriptor with ``{name}.{region}.amazonaws.com`` domain.
    """
    name = service.value
    return ServiceDescriptor(
        name=name,
        domain=f"{name}.{region}.amazonaws.com",
        api_version=_API_VERSIONS[service],
    )


# ---------------------------------------------------------------------------
# YAML tag placeholders and value resolution
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)  # type: ignore[arg-type]
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


def _coerce_bool(value: object) -> bool:
    """Coerce a value to bool, handling string representations."""
    if isinstance(value, bool):
        return value
    s = str(value).lower().strip()
    if s in _BOOL_TRUTHY:
        return True
    if s in _BOOL_FALSY:
        return False
    raise ConfigError(f"Cannot convert {value!r} to bool")


def _raw_resolve(value: object) -> str | None:
    """Resolve an ``_EnvVar`` to its string value, or stringify literals.

    Returns None if the value is None or the env var is not set.
    """
    if isinstance(value, _EnvVar):
        return os.environ.get(value.var_name)
    if value is None:
        return None
    return str(value)


_MISSING = object()


def _resolve(
    value: object,
    coerce: type[Any],
    *,
    default: object = _MISSING,
) -> Any:
    """Resolve a YAML value, handling ``!env`` tags and type coercion.

    Args:
        value: Raw value from YAML (may be ``_EnvVar``, None, or a
            literal already parsed by PyYAML).
        coerce: Target type (``str``, ``int``, ``float``, ``bool``,
            ``Path``).
        default: Default when value is absent.

    Returns:
        The resolved, coerced value, or None when absent without a default.
    """
    if not isinstance(value, _EnvVar) and value is not None:
        if coerce is bool:
            return _coerce_bool(value)
        if isinstance(value, coerce) and not isinstance(value, bool):
            return value

    resolved = _raw_resolve(value)

    if resolved is None:
        if default is not _MISSING:
            return default
        return None

    if coerce is bool:
        return _coerce_bool(resolved)
    if coerce is Path:
        return Path(resolved).expanduser()
    try:
        return coerce(resolved)
    except ValueError as e:
        raise ConfigError(
            f"Cannot convert {resolved!r} to {coerce.__name__}"
        ) from e


def _section(raw: dict, name: str) -> dict:
    """Return a mapping section, treating a missing section as empty."""
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a YAML mapping")
    return section


# ---------------------------------------------------------------------------
# Top-level configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CloudSignConfig:
    """Complete, immutable signing configuration.

    Attributes:
        credentials: Access key pair for symmetric and SigV4 signing.
        region: Region for SigV4 scopes and service domains.
        timeout_seconds: Transport timeout for every request.
        s3_bucket: Bucket for object uploads, deletes and moves.
        s3_move_storage_class: Storage class set on moved objects.
        ses_sender: Source address for outgoing email.
        ses_endpoint: SES query endpoint URL.
        send_email: When False, email sends are skipped and reported as
            successful (for non-production deployments).
        push_ios_arn: SNS platform application ARN for APNS.
        push_android_arn: SNS platform application ARN for GCM.
        cloudfront_key_pair_id: Key pair id placed in signed URLs.
        cloudfront_private_key_path: PEM file with the CloudFront key.
    """

    credentials: Credentials
    region: str = DEFAULT_REGION
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    s3_bucket: str = ""
    s3_move_storage_class: str = DEFAULT_MOVE_STORAGE_CLASS
    ses_sender: str = ""
    ses_endpoint: str = DEFAULT_SES_ENDPOINT
    send_email: bool = True
    push_ios_arn: str = ""
    push_android_arn: str = ""
    cloudfront_key_pair_id: str = ""
    cloudfront_private_key_path: Path | None = None

    def __post_init__(self) -> None:
        """Validate configuration.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if not self.region:
            raise ConfigError("Region must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigError(
                f"Timeout must be > 0s: {self.timeout_seconds}"
            )

    def service(self, service: Service) -> ServiceDescriptor:
        """Descriptor for a service in the configured region."""
        return service_descriptor(service, self.region)

    def read_private_key(self) -> str:
        """Read the CloudFront private key PEM text.

        Raises:
            ConfigError: If no path is configured or the file is missing.
        """
        path = self.cloudfront_private_key_path
        if path is None:
            raise ConfigError("cloudfront.private_key_path is not configured")
        if not path.exists():
            raise ConfigError(f"CloudFront private key not found: {path}")
        pem = path.read_text()
        SecretFilter.register_secret(pem)
        return pem

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "CloudSignConfig":
        """Load configuration from a YAML file.

        Values tagged with ``!env VAR_NAME`` are resolved from the
        environment at load time.  ``.env`` files are loaded first.

        Args:
            config_path: Path to the YAML file.  Defaults to
                ``~/.config/cloudsign/cloudsign.yaml`` (XDG).

        Returns:
            CloudSignConfig instance.

        Raises:
            ConfigError: If the file is missing or malformed.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = get_config_path()

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            try:
                raw = yaml.load(f, Loader=_make_loader())
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )

        return cls._from_raw(raw)

    @classmethod
    def _from_raw(cls, raw: dict) -> "CloudSignConfig":
        """Build config from parsed (but unresolved) YAML dict."""
        aws = _section(raw, "aws")
        s3 = _section(raw, "s3")
        ses = _section(raw, "ses")
        sns = _section(raw, "sns")
        cloudfront = _section(raw, "cloudfront")

        credentials = Credentials(
            access_key=_resolve(aws.get("access_key"), str, default=""),
            secret_key=_resolve(aws.get("secret_key"), str, default=""),
        )
        SecretFilter.register_secret(credentials.secret_key)
        if not credentials.is_complete:
            logger.warning("AWS credentials incomplete; signing will fail")

        config = cls(
            credentials=credentials,
            region=_resolve(aws.get("region"), str, default=DEFAULT_REGION),
            timeout_seconds=_resolve(
                aws.get("timeout"), float, default=DEFAULT_TIMEOUT_SECONDS
            ),
            s3_bucket=_resolve(s3.get("bucket"), str, default=""),
            s3_move_storage_class=_resolve(
                s3.get("move_storage_class"),
                str,
                default=DEFAULT_MOVE_STORAGE_CLASS,
            ),
            ses_sender=_resolve(ses.get("sender"), str, default=""),
            ses_endpoint=_resolve(
                ses.get("endpoint"), str, default=DEFAULT_SES_ENDPOINT
            ),
            send_email=_resolve(ses.get("enabled"), bool, default=True),
            push_ios_arn=_resolve(sns.get("ios_arn"), str, default=""),
            push_android_arn=_resolve(
                sns.get("android_arn"), str, default=""
            ),
            cloudfront_key_pair_id=_resolve(
                cloudfront.get("key_pair_id"), str, default=""
            ),
            cloudfront_private_key_path=_resolve(
                cloudfront.get("private_key_path"), Path
            ),
        )
        logger.info(
            "Config loaded: region=%s, bucket=%s",
            config.region,
            config.s3_bucket or "-",
        )
        return config
