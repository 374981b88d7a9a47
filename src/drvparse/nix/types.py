from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple
from types import MappingProxyType

DrvPath = str
StorePath = str
OutputName = str

EnvPair = Tuple[str, str]

@dataclass(frozen=True)
class DerivationOutput:
    """One named output of a derivation"""
    name: OutputName
    path: StorePath
    # both empty unless this is a fixed-output derivation
    hash_algorithm: str = ""
    hash: str = ""

    @property
    def is_fixed_output(self) -> bool:
        return bool(self.hash)

@dataclass(frozen=True)
class InputDerivation:
    """An upstream derivation and the outputs of it that are depended on"""
    drv_path: DrvPath
    output_names: FrozenSet[OutputName]

@dataclass(frozen=True)
class Derivation:
    """A parsed .drv file"""
    outputs: MappingProxyType = field(repr=False)
    input_derivations: MappingProxyType = field(repr=False)
    input_sources: Tuple[StorePath, ...]
    system: str
    builder: str
    args: Tuple[str, ...]
    env: Tuple[EnvPair, ...] = field(repr=False)

    @property
    def name(self) -> Optional[str]:
        return self.get_env("name")

    @property
    def is_fixed_output(self) -> bool:
        if len(self.outputs) != 1:
            return False
        return next(iter(self.outputs.values())).is_fixed_output

    def get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the last env entry called key, the way a shell would see it"""
        value = default
        for k, v in self.env:
            if k == key:
                value = v
        return value

    def __hash__(self):
        return hash((
            frozenset(self.outputs.items()),
            frozenset(self.input_derivations.items()),
            self.input_sources,
            self.system,
            self.builder,
            self.args,
            self.env,
        ))

    def __eq__(self, other):
        if not isinstance(other, Derivation):
            return False
        return (dict(self.outputs) == dict(other.outputs) and
            dict(self.input_derivations) == dict(other.input_derivations) and
            self.input_sources == other.input_sources and
            self.system == other.system and
            self.builder == other.builder and
            self.args == other.args and
            self.env == other.env)
