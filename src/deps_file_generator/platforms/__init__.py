"""Platform implementations for the deps file pipeline.

This package contains self-contained platform modules that provide closure
source implementations for the different places a resolved package closure
can come from.

Each platform module auto-registers itself with the ClosureSourceRegistry
when imported.
"""

# Platform modules are imported by ClosureSourceRegistry.discover_platforms()
