"""
Form layer: a Bootstrap-styled React form component per emitted class.

Adds ``<T>FormData`` (props) and ``<T>Form`` after each resolver and makes the
namespace a ``.tsx`` file. The ``BootstrapUtils`` helper module is synthesized
once per run when any namespace imports from it.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass

from tsbridge.core.ir import ClassType, Member, NamespaceType, SystemKind, TypeKind
from tsbridge.core.strings import camel_case
from tsbridge.core.symbols import ImportRequest, LibraryImport
from tsbridge.validation import EmailAddressRule, PhoneRule, UrlRule

from .config import MAX_COLUMN_COUNT
from .context import EmitContext
from .declarations import DeclarationEmitter, LayeredEmitter, attached_classes
from .resolver import REACT_HOOK_FORM, RESOLVER_SUFFIX
from .result import TSX_EXTENSION, GeneratedModule
from .script import ScriptBuilder
from .selection import MemberSelection

logger = logging.getLogger(__name__)

BOOTSTRAP_UTILS = "BootstrapUtils"
BOOTSTRAP_UTILS_SOURCE = f"./{BOOTSTRAP_UTILS}"

USE_ID = LibraryImport("react", "useId")
USE_FORM = LibraryImport(REACT_HOOK_FORM, "useForm")
SUBMIT_HANDLER = LibraryImport(REACT_HOOK_FORM, "SubmitHandler")
GET_CLASS_NAME = LibraryImport(BOOTSTRAP_UTILS_SOURCE, "getClassName")
GET_ERROR_MESSAGE = LibraryImport(BOOTSTRAP_UTILS_SOURCE, "getErrorMessage")
GET_CHECKBOX_CLASS_NAME = LibraryImport(BOOTSTRAP_UTILS_SOURCE, "getCheckBoxClassName")

FORM_DATA_SUFFIX = "FormData"
FORM_SUFFIX = "Form"

COL_SPAN_PARAMETER = "colSpan"
WILDCARD_SPAN = "*"


@dataclass(frozen=True)
class GridCell:
    """One field of a grid row and its Bootstrap width."""

    member: Member
    width: int


def column_widths(column_count: int) -> list[int]:
    """
    Bootstrap widths of the grid columns; the last column absorbs the
    remainder of the 12-unit row.

    Examples:
        >>> column_widths(5)
        [2, 2, 2, 2, 4]
        >>> column_widths(4)
        [3, 3, 3, 3]
    """
    average = MAX_COLUMN_COUNT // column_count
    widths = [average] * column_count
    widths[-1] += MAX_COLUMN_COUNT % column_count
    return widths


def column_span(member: Member, column_count: int) -> int | None:
    """
    Number of grid columns a member occupies, from its ``colSpan`` UI hint
    parameter.

    ``"*"`` returns None: the member takes the rest of its row. Values that
    are not positive integers fall back to 1; larger values are clamped to
    the column count.
    """
    raw = member.ui_hint_parameters.get(COL_SPAN_PARAMETER)
    if raw is None:
        return 1

    raw = raw.strip()
    if raw == WILDCARD_SPAN:
        return None
    try:
        span = int(raw)
    except ValueError:
        span = 0
    if span <= 0:
        logger.warning("Ignoring %s=%r on %s: not a positive integer", COL_SPAN_PARAMETER, raw, member)
        return 1
    return min(span, column_count)


def grid_rows(members: list[Member], column_count: int) -> list[list[GridCell]]:
    """
    Members placed into rows left to right.

    A member that does not fit the remaining columns starts a new row; the
    last row may be shorter.
    """
    widths = column_widths(column_count)
    rows: list[list[GridCell]] = []
    row: list[GridCell] = []
    used = 0

    for member in members:
        span = column_span(member, column_count)
        if span is None:
            span = column_count - used
        elif used + span > column_count:
            rows.append(row)
            row, used = [], 0

        row.append(GridCell(member, sum(widths[used : used + span])))
        used += span
        if used == column_count:
            rows.append(row)
            row, used = [], 0

    if row:
        rows.append(row)
    return rows


def jsx_text(text: str) -> str:
    """Escape text placed between JSX tags, including expression braces."""
    return html.escape(text, quote=False).replace("{", "&#123;").replace("}", "&#125;")


def input_type(member: Member) -> str:
    """
    ``type`` attribute of a text-like input.

    UI hint first, then number, date, rule-implied url/email/tel, then text.
    """
    if member.ui_hint:
        return member.ui_hint

    match member.system_kind:
        case SystemKind.NUMBER:
            return "number"
        case SystemKind.BOOLEAN:
            return "checkbox"
        case SystemKind.DATE:
            return "date"

    for rule_type, kind in ((UrlRule, "url"), (EmailAddressRule, "email"), (PhoneRule, "tel")):
        if any(isinstance(rule, rule_type) for rule in member.rules):
            return kind
    return "text"


def renders_checkbox(member: Member) -> bool:
    return member.system_kind == SystemKind.BOOLEAN and not member.is_hidden


def bootstrap_utils_module(indentation: str = "\t") -> GeneratedModule:
    """The shared Bootstrap class-name and error-message helpers."""
    sb = ScriptBuilder(indentation)
    sb.line("import { FieldError } from 'react-hook-form';")
    sb.blank()

    helpers = (
        ("getClassName", "form-control"),
        ("getCheckBoxClassName", "form-check-input"),
    )
    for name, css_class in helpers:
        sb.line(
            f"export const {name} = (isValidated: boolean | undefined, "
            "error: FieldError | undefined): string =>"
        )
        with sb.indent():
            sb.line(
                f'error ? "{css_class} is-invalid" : '
                f'(isValidated ? "{css_class} is-valid" : "{css_class}");'
            )
        sb.blank()

    sb.line("export const getErrorMessage = (error: FieldError | undefined) =>")
    with sb.indent():
        sb.line('error && <span className="invalid-feedback">{error.message}</span>;')

    return GeneratedModule(TSX_EXTENSION, sb.to_string(), is_helper=True)


class FormEmitter(LayeredEmitter):
    """
    Appends ``<T>FormData`` and ``<T>Form`` after each resolver.

    Must wrap a ``ResolverEmitter``: the form binds ``<T>Resolver``.
    """

    def __init__(
        self,
        inner: DeclarationEmitter | LayeredEmitter,
        column_count: int = 1,
        indentation: str = "\t",
    ):
        super().__init__(inner)
        self.column_count = column_count
        self.indentation = indentation

    def requests(self, namespace: NamespaceType, selection: MemberSelection) -> list[ImportRequest]:
        requests = self.inner.requests(namespace, selection)
        classes = attached_classes(namespace)
        if not classes:
            return requests

        requests += [USE_ID, USE_FORM, SUBMIT_HANDLER, GET_CLASS_NAME, GET_ERROR_MESSAGE]
        if any(
            renders_checkbox(m) for node in classes for m in selection.instance_members(node)
        ):
            requests.append(GET_CHECKBOX_CLASS_NAME)
        return requests

    def class_symbol_suffixes(self) -> list[str]:
        return self.inner.class_symbol_suffixes() + [FORM_DATA_SUFFIX, FORM_SUFFIX]

    def file_extension(self, namespace: NamespaceType, selection: MemberSelection) -> str:
        if attached_classes(namespace):
            return TSX_EXTENSION
        return self.inner.file_extension(namespace, selection)

    def helper_modules(self, sources: set[str]) -> dict[str, GeneratedModule]:
        helpers = self.inner.helper_modules(sources)
        if BOOTSTRAP_UTILS_SOURCE in sources:
            helpers[BOOTSTRAP_UTILS] = bootstrap_utils_module(self.indentation)
        return helpers

    def emit_class(self, node: ClassType, ctx: EmitContext) -> None:
        self.inner.emit_class(node, ctx)
        if node.is_generic:
            return
        ctx.sb.blank()
        self.emit_form(node, ctx)

    def emit_form(self, node: ClassType, ctx: EmitContext) -> None:
        sb = ctx.sb
        type_name = ctx.reference(node)
        prop_name = camel_case(node.name)
        export = ctx.export_prefix(node)
        own_params, base_params = ctx.selection.constructor_parameters(node)
        needs_value = bool(own_params or base_params)

        members = ctx.selection.instance_members(node)
        hidden = [m for m in members if m.is_hidden]
        visible = [m for m in members if not m.is_hidden]

        sb.line(f"{export}type {node.name}{FORM_DATA_SUFFIX} = {{")
        with sb.indent():
            sb.line(f"{prop_name}{'' if needs_value else '?'}: {type_name},")
            sb.line(f"onSubmit: {ctx.symbol(SUBMIT_HANDLER)}<{type_name}>")
        sb.line("};")
        sb.blank()

        sb.line(f"{export}const {node.name}{FORM_SUFFIX} = (props: {node.name}{FORM_DATA_SUFFIX}) => {{")
        with sb.indent():
            sb.line(f"const formId = {ctx.symbol(USE_ID)}();")
            sb.line(
                "const { register, handleSubmit, formState: { errors, touchedFields, isSubmitting } } = "
                f"{ctx.symbol(USE_FORM)}<{type_name}>({{"
            )
            with sb.indent():
                sb.line('mode: "onTouched",')
                sb.line(f"resolver: {node.name}{RESOLVER_SUFFIX},")
                default_values = f"defaultValues: props.{prop_name}"
                if not needs_value:
                    default_values += f" ?? new {type_name}()"
                sb.line(default_values)
            sb.line("});")
            sb.blank()

            sb.line("return <form onSubmit={handleSubmit(props.onSubmit)}>")
            with sb.indent():
                for member in hidden:
                    sb.line(f'<input type="hidden" {{...register("{ctx.member_name(member)}")}} />')
                for row in grid_rows(visible, self.column_count):
                    self._emit_row(row, ctx)
                self._emit_buttons(sb)
            sb.line("</form>;")
        sb.line("};")

        logger.debug("Form for %s: %d field(s) in %d column(s)", node, len(visible), self.column_count)

    def _emit_row(self, row: list[GridCell], ctx: EmitContext) -> None:
        sb = ctx.sb
        sb.line('<div className="row mb-3">')
        with sb.indent():
            for cell in row:
                sb.line(f'<div className="form-group col-md-{cell.width}">')
                with sb.indent():
                    self._emit_field(cell.member, ctx)
                sb.line("</div>")
        sb.line("</div>")

    def _emit_field(self, member: Member, ctx: EmitContext) -> None:
        sb = ctx.sb
        name = ctx.member_name(member)
        element_id = f'{{formId + "-{name}"}}'
        touched = ctx.access("touchedFields", member)
        error = ctx.access("errors", member)
        placeholder = f' placeholder="{html.escape(member.prompt)}"' if member.prompt else ""

        if member.type.kind == TypeKind.ENUM:
            sb.line(f"<label htmlFor={element_id}>{jsx_text(member.display)}:</label>")
            sb.line(
                f"<select className={{{ctx.symbol(GET_CLASS_NAME)}({touched}, {error})}} "
                f'id={element_id} {{...register("{name}")}}>'
            )
            with sb.indent():
                if not member.is_required:
                    sb.line(f'<option value="">Select a {jsx_text(member.display)}</option>')
                for value in member.type.values:  # type: ignore[union-attr]
                    sb.line(f'<option value="{html.escape(str(value.value))}">{jsx_text(value.display_name)}</option>')
            sb.line("</select>")
        elif renders_checkbox(member):
            sb.line('<div className="form-check">')
            with sb.indent():
                sb.line(
                    f'<input type="{input_type(member)}" '
                    f"className={{{ctx.symbol(GET_CHECKBOX_CLASS_NAME)}({touched}, {error})}} "
                    f'id={element_id} {{...register("{name}")}} />'
                )
                sb.line(f'<label className="form-check-label" htmlFor={element_id}>{jsx_text(member.display)}</label>')
            sb.line("</div>")
        else:
            options = ""
            if member.system_kind == SystemKind.NUMBER:
                options = ", { valueAsNumber: true }"
            elif member.system_kind == SystemKind.DATE:
                options = ", { valueAsDate: true }"
            if member.type.kind != TypeKind.SYSTEM:
                logger.debug("Rendering %s as a text input", member)
            sb.line(f"<label htmlFor={element_id}>{jsx_text(member.display)}:</label>")
            sb.line(
                f'<input type="{input_type(member)}" '
                f"className={{{ctx.symbol(GET_CLASS_NAME)}({touched}, {error})}} "
                f'id={element_id}{placeholder} {{...register("{name}"{options})}} />'
            )
        sb.line(f"{{{ctx.symbol(GET_ERROR_MESSAGE)}({error})}}")

    def _emit_buttons(self, sb: ScriptBuilder) -> None:
        sb.line('<div className="row">')
        with sb.indent():
            sb.line('<div className="form-group col-md-12">')
            with sb.indent():
                sb.line('<button className="btn btn-primary" type="submit" disabled={isSubmitting}>Submit</button>')
                sb.line(
                    '<button className="btn btn-secondary mx-1" type="reset" '
                    "disabled={isSubmitting}>Reset</button>"
                )
            sb.line("</div>")
        sb.line("</div>")
