"""Default configuration values for factorygen."""

DEFAULTS: dict[str, object] = {
    # Where generated modules are written (a source root on the build's path).
    "OUTPUT_DIR": "generated",
    # Package for generated modules; None places them beside the group's package.
    "GENERATED_PACKAGE": None,
    "FACTORY_SUFFIX": "Factory",
    "MODULE_SUFFIX": "_factory",
    "FAIL_FAST": False,
    "MAX_SUPERCLASS_DEPTH": 64,
    # Resolved decorator names recognized as the factory marker.
    "ANNOTATION_NAMES": (
        "factorygen.factory",
        "factorygen.decorators.factory",
    ),
    "SOURCE_ROOTS": (),
    "DISCOVERY_PATHS": (),
    "ENCODING": "utf-8",
    "RUNTIME_MODULE": "factorygen.runtime",
}
