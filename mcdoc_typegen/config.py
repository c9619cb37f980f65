# Generator settings
from dataclasses import dataclass
from pathlib import Path

# A dispatcher is inlined into its top referencing module only when that
# module's reference count exceeds the runner-up's by more than this margin.
PLACEMENT_MARGIN = 5

# Largest closed range rendered as a literal {min, max} generic.
RANGE_CARDINALITY_LIMIT = 100

# Module paths
PATH_SEPARATOR = "::"
JAVA_ROOT = "java"
SANDSTONE_ROOT = "sandstone"
DISPATCHER_MODULE = "::java::dispatcher"
REGISTRY_MODULE = "::java::registry"
RESOURCES_MODULE = "::java::resources"
GENERATED_ROOT = "sandstone/generated"

DEFAULT_NAMESPACE = "minecraft"

# Spyglass API
SPYGLASS_API = "https://api.spyglassmc.com"
SYMBOLS_URL = f"{SPYGLASS_API}/vanilla-mcdoc/symbols"
VERSIONS_URL = f"{SPYGLASS_API}/mcje/versions"
LANG_URL = "https://raw.githubusercontent.com/misode/mcmeta/assets-json/assets/minecraft/lang/en_us.json"

CACHE_DIR = Path("cache")

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "mcdoc-typegen",
}


@dataclass(frozen=True)
class GeneratorOptions:
    out_dir: Path = Path("types")
    use_cache: bool = True
