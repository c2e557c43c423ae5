"""Custom exceptions used across depotflow."""


class DepotFlowError(Exception):
    """Base error for the application."""


class ConfigError(DepotFlowError):
    """Configuration related error."""


class ConfigMissingError(ConfigError):
    """Raised when required environment configuration is absent."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing environment variables: {', '.join(missing)}")
        self.missing = list(missing)


class UnknownTargetError(DepotFlowError):
    """Raised when a build target key has no registered upload target."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No build info found for BUILD_TARGET '{key}'")
        self.key = key


class ToolNotFoundError(DepotFlowError):
    """Raised when the steamcmd executable is missing."""


class BuildPathNotFoundError(DepotFlowError):
    """Raised when the exported build directory cannot be located."""


class ManifestWriteError(DepotFlowError):
    """Raised when the app build manifest cannot be written."""


class ConfigDecodeError(DepotFlowError):
    """Raised when the encoded steamcmd config blob cannot be decoded."""


class CredentialStageError(DepotFlowError):
    """Raised when the decoded steamcmd config cannot be written next to the tool."""
