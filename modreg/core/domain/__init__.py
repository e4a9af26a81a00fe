"""
Domain — pure functions over versions and graphs.

No filesystem access, no logging side effects. Pure input→output.
"""

from modreg.core.domain.dag import (  # noqa: F401
    find_cycles,
    strongly_connected_components,
    topological_sort,
)
from modreg.core.domain.semver import (  # noqa: F401
    Version,
    VersionError,
    VersionRange,
    intersect_ranges,
    is_valid_range,
    is_valid_version,
    max_satisfying,
    parse_range,
    parse_version,
    satisfies,
    sort_versions,
)
