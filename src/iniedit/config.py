import os
from collections.abc import Mapping
from typing import Self

import attrs
import cattrs

ENV_PREFIX = "INIEDIT_"

converter = cattrs.Converter(forbid_extra_keys=True)
# Settings usually come from text (environment variables, INI sections).
converter.register_structure_hook(int, lambda v, _: int(v))
converter.register_structure_hook(float, lambda v, _: float(v))


def _positive(instance, attribute, value):
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


@attrs.define(frozen=True)
class Settings:
    """Tunables shared by the reading and writing operations.

    Attributes:
        sample_size: Number of leading bytes fed to the encoding detector.
        fallback_encoding: The encoding to assume when detection fails.
            Legacy INI files are rarely UTF-8, so this defaults to code page 1252.
        min_confidence: Detector results below this confidence are discarded
            in favour of the fallback encoding.
        temp_suffix: Suffix of the sibling file written before the atomic rename.
    """

    sample_size: int = attrs.field(default=4096, validator=_positive)
    fallback_encoding: str = "windows-1252"
    min_confidence: float = attrs.field(
        default=0.0, validator=[attrs.validators.ge(0.0), attrs.validators.le(1.0)]
    )
    temp_suffix: str = attrs.field(default=".tmp", validator=attrs.validators.min_len(1))

    def to_dict(self) -> dict[str, str]:
        """Serialize the settings to a dict of strings.

        Returns:
            The dict.
        """

        return {k: str(v) for k, v in converter.unstructure(self).items()}

    @classmethod
    def from_dict(cls, config: Mapping[str, str]) -> Self:
        """Parse settings from a dict. Missing fields keep their defaults.

        Args:
            config: The dict to parse from, i.e. an INI section.

        Returns:
            The settings.

        Raises:
            cattrs.BaseValidationError: A field is unknown or could not be converted.
            ValueError: A field is out of range.
        """

        return converter.structure(dict(config), cls)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Parse settings from INIEDIT_* environment variables.

        Args:
            environ: The environment to read. Defaults to os.environ.

        Returns:
            The settings.
        """

        if environ is None:
            environ = os.environ

        config = {
            k.removeprefix(ENV_PREFIX).lower(): v
            for k, v in environ.items()
            if k.startswith(ENV_PREFIX)
        }

        return cls.from_dict(config)


DEFAULT = Settings()


def resolve(settings: Settings | None) -> Settings:
    return DEFAULT if settings is None else settings
