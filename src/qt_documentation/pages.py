"""Names of the documentation pages that describe a scope."""

from qt_documentation.models import Class, DeclarationContext
from qt_documentation.settings import DEFAULT_SETTINGS, MatchingSettings


def page_key(context: DeclarationContext | None, settings: MatchingSettings = DEFAULT_SETTINGS) -> str:
    """Return the page file documenting the members of a scope.

    qdoc names a page after its lower-cased class; interfaces lose their
    leading ``I`` and nested classes are prefixed with their parent, as in
    ``qabstractanimation.html`` or ``qtextlayout-formatrange.html``.

    Args:
        context: Scope owning the declaration.
        settings: Page naming settings.

    Returns:
        Page file name.
    """
    if context is None or not context.name:
        return settings.global_page
    name = context.name.lower()
    if isinstance(context, Class) and context.is_interface:
        name = name[1:]
    parent = context.namespace
    if isinstance(parent, Class):
        name = f"{parent.name.lower()}-{name}"
    return name + settings.page_suffix


def obsolete_page_key(key: str, settings: MatchingSettings = DEFAULT_SETTINGS) -> str:
    """Return the page listing the obsolete members of a scope.

    Args:
        key: Page file name from :func:`page_key`.
        settings: Page naming settings.

    Returns:
        Obsolete members page file name.
    """
    return key.replace(settings.page_suffix, settings.obsolete_suffix)
