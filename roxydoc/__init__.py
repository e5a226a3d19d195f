"""Roxygen entry scanning, argument merging and template editing for R sources."""

from .arguments import (
    FunctionSignature,
    ParamDescriptor,
    extract_args,
    find_function_signature,
    find_matching_delimiter,
    merge_args,
    parse_param_fields,
)
from .buffer import TextBuffer
from .config import RoxyConfig, load_config
from .entry import (
    complete_tag,
    continue_line,
    fill_field,
    render_params,
    render_template,
    toggle_region,
    update_entry,
)
from .errors import ConfigError, NoFunctionError, RoxyError, UnbalancedDelimiterError
from .scanner import (
    DEFAULT_MARKER,
    Field,
    LineRange,
    entry_bounds,
    field_bounds,
    iter_entries,
    iter_fields,
    next_entry,
    previous_entry,
    strip_marker,
)

__version__ = "0.1.0"
