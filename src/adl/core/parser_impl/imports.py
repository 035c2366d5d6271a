"""
Import statements.

    import { a, b } from "module"        -> named
    import * as ns from "module"         -> namespace
    import thing from "module"           -> default
    import nodes { a, b } from "f.adl"   -> graph nodes from another ADL file
    import tools { t } from "f.adl"      -> tools from another ADL file

Once `import` has been seen no other statement can match, so a malformed
import is reported as such instead of backtracking.
"""

from .. import ir
from .combinators import choice, commit, keyword, sep_by, seq, string, transform
from .lexical import comma, identifier, quoted_path, space, ws, ws1

name_list = transform(
    seq(string("{"), space, sep_by(identifier, comma), space, string("}", "'}'")),
    lambda values: values[2],
)

from_clause = transform(
    seq(ws, keyword("from"), ws, quoted_path),
    lambda values: values[3],
)

node_import = transform(
    seq(choice(keyword("nodes"), keyword("node")), ws, name_list, from_clause),
    lambda values: ir.ImportNodeStatement(imported_nodes=values[2], adl_file=values[3]),
)

tool_import = transform(
    seq(choice(keyword("tools"), keyword("tool")), ws, name_list, from_clause),
    lambda values: ir.ImportToolStatement(imported_tools=values[2], adl_file=values[3]),
)

named_import = transform(
    seq(name_list, from_clause),
    lambda values: ir.ImportStatement(
        import_kind="named", imported_names=values[0], module_path=values[1]
    ),
)

namespace_import = transform(
    seq(string("*"), ws, keyword("as"), ws1, identifier, from_clause),
    lambda values: ir.ImportStatement(
        import_kind="namespace", imported_names=[values[4]], module_path=values[5]
    ),
)

default_import = transform(
    seq(identifier, from_clause),
    lambda values: ir.ImportStatement(
        import_kind="default", imported_names=[values[0]], module_path=values[1]
    ),
)

import_statement = transform(
    seq(
        keyword("import"),
        ws,
        commit(
            choice(node_import, tool_import, named_import, namespace_import, default_import),
            "Malformed import statement",
        ),
    ),
    lambda values: values[2],
)
