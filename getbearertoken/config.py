"""Command-line configuration for getbearertoken."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .errors import ArgumentConflictError, ArgumentError


@dataclass(frozen=True)
class CloudEnvironment:
    """Login host and default resource of an Azure cloud."""

    name: str
    authority_host: str
    resource_manager: str


CLOUD_ENVIRONMENTS = {
    "azurepubliccloud": CloudEnvironment(
        "AzurePublicCloud",
        "https://login.microsoftonline.com/",
        "https://management.core.windows.net/",
    ),
    "azureusgovernmentcloud": CloudEnvironment(
        "AzureUSGovernmentCloud",
        "https://login.microsoftonline.us/",
        "https://management.core.usgovcloudapi.net/",
    ),
    "azurechinacloud": CloudEnvironment(
        "AzureChinaCloud",
        "https://login.chinacloudapi.cn/",
        "https://management.core.chinacloudapi.cn/",
    ),
    "azuregermancloud": CloudEnvironment(
        "AzureGermanCloud",
        "https://login.microsoftonline.de/",
        "https://management.core.cloudapi.de/",
    ),
}
DEFAULT_ENVIRONMENT = "AzurePublicCloud"


class AuthMode(str, Enum):
    CERTIFICATE = "certificate"
    MANAGED_IDENTITY = "managed-identity"


@dataclass(frozen=True)
class InvocationParameters:
    """Everything a single run needs, parsed once from the command line."""

    token_file_output: str
    mode: AuthMode = AuthMode.CERTIFICATE
    application_id: str = ""
    tenant_id: str = ""
    certificate_path: str = ""
    pfx_password: str = ""
    use_sni_auth: bool = False
    environment: CloudEnvironment = CLOUD_ENVIRONMENTS["azurepubliccloud"]
    resource: Optional[str] = None
    timeout: Optional[float] = None
    verbose: bool = False

    def __repr__(self) -> str:
        # pfx_password stays out of any log line or traceback.
        return (
            f"InvocationParameters(mode={self.mode.value!r}, "
            f"application_id={self.application_id!r}, tenant_id={self.tenant_id!r}, "
            f"certificate_path={self.certificate_path!r}, "
            f"use_sni_auth={self.use_sni_auth!r}, "
            f"environment={self.environment.name!r}, resource={self.resource!r}, "
            f"token_file_output={self.token_file_output!r})"
        )

    @property
    def authority(self) -> str:
        """Microsoft Entra authority URL for the configured tenant."""

        return f"{self.environment.authority_host.rstrip('/')}/{self.tenant_id}"

    @property
    def scopes(self) -> list[str]:
        resource = self.resource or self.environment.resource_manager
        return [f"{resource}/.default"]


TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}
VALUE_FLAGS = {
    "applicationid",
    "tenantid",
    "certificate",
    "pfxpassword",
    "tokenfileoutput",
    "environment",
    "resource",
    "timeout",
}


def _bool_flag(value: str) -> bool:
    """argparse ``type`` for ``-flag=true`` style boolean values."""

    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


class FlagParser(argparse.ArgumentParser):
    """ArgumentParser that raises ``ArgumentError`` instead of exiting."""

    def error(self, message: str):
        raise ArgumentError(
            f"{message}, please execute {self.prog} -h or --help for more information"
        )


def build_parser(prog: str = "getbearertoken") -> FlagParser:
    parser = FlagParser(
        prog=prog,
        description="Gets a bearer token from certificate or managed identity "
        "based authentication and writes it to a file.",
        allow_abbrev=False,
    )

    def flag(name: str, **kwargs) -> None:
        parser.add_argument(f"-{name}", f"--{name}", dest=name, **kwargs)

    def bool_flag(name: str, help_text: str) -> None:
        flag(
            name,
            nargs="?",
            const=True,
            default=False,
            type=_bool_flag,
            metavar="BOOL",
            help=help_text,
        )

    flag("applicationid", default="", help="service principal's application id")
    flag("tenantid", default="", help="service principal's tenant id")
    flag(
        "certificate",
        default="",
        help="full path to the certificate, pfx-formatted, containing the "
        "certificate and private key to be used in the authentication process",
    )
    flag(
        "pfxpassword",
        default="",
        help="optional, pfx file password, it defaults to empty string",
    )
    flag("tokenfileoutput", default="", help="full filename of the generated token")
    bool_flag("usesniauth", "uses subject name/issuer authentication (sends x5c chain)")
    bool_flag("usemanagedidentity", "use managed identity for authentication")
    bool_flag("version", "shows current tool version")
    flag(
        "environment",
        default=DEFAULT_ENVIRONMENT,
        help="Azure cloud name, one of: "
        + ", ".join(env.name for env in CLOUD_ENVIRONMENTS.values()),
    )
    flag(
        "resource",
        default=None,
        help="resource the token is requested for, defaults to the cloud's "
        "resource manager endpoint",
    )
    flag("timeout", default=None, type=float, help="token request timeout in seconds")
    bool_flag("verbose", "enables debug logging")
    return parser


def parse_flags(argv: Sequence[str], prog: str = "getbearertoken") -> argparse.Namespace:
    """Parse ``argv`` (without the program name) into a namespace."""

    if not argv:
        raise ArgumentError(
            f"invalid number of arguments, please execute {prog} -h or --help "
            "for more information"
        )
    return build_parser(prog).parse_args(_join_flag_values(argv))


def _join_flag_values(argv: Sequence[str]) -> list[str]:
    """Rewrite ``-flag value`` pairs as ``-flag=value``.

    Value flags take the next argument verbatim, even when it starts with a
    dash (``-pfxpassword -Xy9!``), which argparse would otherwise reject.
    """

    joined = []
    items = iter(argv)
    for item in items:
        if item.startswith("-") and "=" not in item and item.lstrip("-") in VALUE_FLAGS:
            value = next(items, None)
            if value is not None:
                item = f"{item}={value}"
        joined.append(item)
    return joined


def _resolve_environment(name: str) -> CloudEnvironment:
    environment = CLOUD_ENVIRONMENTS.get(name.strip().lower())
    if environment is None:
        supported = ", ".join(env.name for env in CLOUD_ENVIRONMENTS.values())
        raise ArgumentError(
            f"unsupported environment '{name}', supported values: {supported}"
        )
    return environment


def load_parameters(args: argparse.Namespace) -> InvocationParameters:
    """Validate parsed flags and freeze them into ``InvocationParameters``."""

    if args.usemanagedidentity and (
        args.usesniauth or args.certificate or args.pfxpassword
    ):
        raise ArgumentConflictError(
            "cannot use certificate arguments while using -usemanagedidentity"
        )

    if not args.tokenfileoutput:
        raise ArgumentError("-tokenfileoutput is required")

    mode = AuthMode.MANAGED_IDENTITY if args.usemanagedidentity else AuthMode.CERTIFICATE
    if mode is AuthMode.CERTIFICATE:
        missing = [
            name
            for name in ("applicationid", "tenantid", "certificate")
            if not getattr(args, name)
        ]
        if missing:
            raise ArgumentError(
                "missing required arguments for certificate authentication: "
                + ", ".join(f"-{name}" for name in missing)
            )

    if args.timeout is not None and args.timeout <= 0:
        raise ArgumentError(f"-timeout must be a positive number, got {args.timeout}")

    return InvocationParameters(
        token_file_output=args.tokenfileoutput,
        mode=mode,
        application_id=args.applicationid,
        tenant_id=args.tenantid,
        certificate_path=args.certificate,
        pfx_password=args.pfxpassword,
        use_sni_auth=args.usesniauth,
        environment=_resolve_environment(args.environment),
        resource=args.resource or None,
        timeout=args.timeout,
        verbose=args.verbose,
    )
