"""Depth-first traversal of a content graph.

For each reference the walker goes through Fetching and then Emit,
Descend, Skip or Fail:

1. Cancelled, cyclic (under PRUNE), gated remote and non-fetchable
   references are skipped before anything is fetched.
2. The content getter for the reference's MIME type fetches it; missing
   resources end the branch when ignore_not_found is set.
3. The content is yielded, then (html/svg only) every referenced
   attribute is resolved and walked in document order.

A diamond (A->B, A->C, B->D, C->D) yields D twice: only the resolution
chain is checked, not a global visited set.
"""

from itertools import islice
from typing import AsyncIterator, Dict, Iterator, Optional, Tuple, Union

from jen.content import (
    ContentEntry,
    HtmlContent,
    MimeTable,
    SourceLocation,
    SvgContent,
    get_content,
)
from jen.exceptions import CycleError, PermissionDenied, ResourceNotFound
from jen.fetch import Fetcher
from jen.log import get_logger
from jen.refs import Reference
from jen.refs.urls import has_scheme

from .attributes import HTML_REFERENCES, SVG_REFERENCES, ReferenceAttribute
from .options import CyclePolicy, WalkOptions

logger = get_logger("walker")

# References in these schemes never name a fetchable resource
SKIPPED_SCHEMES = frozenset({'mailto', 'javascript', 'data', 'tel'})

SCRIPT_MIME_TYPE = "application/javascript"

Discovered = Tuple[Reference, str, SourceLocation]


def _by_tag(table: Tuple[ReferenceAttribute, ...]
            ) -> Dict[Tuple[Optional[str], str], Tuple[ReferenceAttribute, ...]]:
    grouped: Dict[Tuple[Optional[str], str], Tuple[ReferenceAttribute, ...]] = {}
    for attr in table:
        key = (attr.tag_namespace, attr.tag)
        grouped[key] = grouped.get(key, ()) + (attr,)
    return grouped


_HTML_BY_TAG = _by_tag(HTML_REFERENCES)
_SVG_BY_TAG = _by_tag(SVG_REFERENCES)


class ContentWalker:
    """Walks content graphs starting from an entry reference.

    Example:
        walker = ContentWalker(FetcherRegistry.default())
        entry = Reference.create("site/index.html", root="site")
        async for item in walker.walk(entry, options=WalkOptions(ignore_not_found=True)):
            print(item.content.type, item.content.ref.display(), item.source)
    """

    def __init__(self, fetcher: Fetcher, mime_table: Optional[MimeTable] = None):
        self.fetcher = fetcher
        self.mime_table = mime_table if mime_table is not None else MimeTable()

    async def walk(self, entry: Reference, content_type: Optional[str] = None,
                   options: Optional[WalkOptions] = None) -> AsyncIterator[ContentEntry]:
        """Yield every content node reachable from entry, depth-first.

        Args:
            entry: Where to start
            content_type: MIME type of entry; sniffed from its extension
                          when omitted
            options: Traversal options (defaults: prune cycles, local only,
                     missing resources are errors)

        Raises:
            CycleError: On a cycle under CyclePolicy.FAIL
            FetchError: On fetch failures not covered by ignore_not_found
            ResolutionError: On malformed reference values
        """
        if options is None:
            options = WalkOptions()
        mime_type = content_type or self.mime_table.guess_or_default(entry.target)
        async for item in self._walk(entry, mime_type, None, options):
            yield item

    async def _walk(self, ref: Reference, mime_type: str,
                    source: Optional[SourceLocation],
                    options: WalkOptions) -> AsyncIterator[ContentEntry]:
        if options.cancelled:
            return
        if not self._enter(ref, options):
            return
        if not ref.is_local and not options.follow_remote_references:
            logger.debug("Skipping remote reference %s", ref.target)
            return
        if not self.fetcher.supports(ref):
            logger.debug("No fetcher for %s", ref.target)
            return

        if options.observe is not None:
            options.observe(ref)

        try:
            content = await get_content(ref, mime_type, self.fetcher)
        except (ResourceNotFound, PermissionDenied) as e:
            if not options.ignore_not_found:
                raise
            logger.debug("Ignoring %s: %s", ref.display(), e)
            return

        yield ContentEntry(content=content, source=source)

        if isinstance(content, (HtmlContent, SvgContent)):
            for child, child_mime, child_source in self.discover(content):
                async for item in self._walk(child, child_mime, child_source, options):
                    yield item

    def _enter(self, ref: Reference, options: WalkOptions) -> bool:
        """Apply the cycle policy; return False to prune this branch."""
        location = ref.location
        if not any(ancestor.location == location
                   for ancestor in islice(ref.chain(), 1, None)):
            return True

        if options.cycle_policy is CyclePolicy.ALLOW:
            return True
        if options.cycle_policy is CyclePolicy.PRUNE:
            logger.debug("Pruning cycle at %s", ref.display())
            return False
        raise CycleError([r.target for r in reversed(list(ref.chain()))])

    def discover(self, content: Union[HtmlContent, SvgContent]) -> Iterator[Discovered]:
        """Yield (reference, mime type, source) for each referenced attribute.

        References come out in document order; several attributes on one
        element keep their table order. Source positions are only reported,
        never used for ordering.
        """
        document = content.document
        table = _HTML_BY_TAG if isinstance(content, HtmlContent) else _SVG_BY_TAG

        for namespace, name, element in document.iter_elements():
            for attr in table.get((namespace, name), ()):
                value = document.attribute(element, attr.attribute,
                                           attr.attribute_namespace)
                if value is None:
                    continue
                value = value.strip()
                # Same-document references
                if not value or value.startswith('#'):
                    continue
                if has_scheme(value) and value.split(':', 1)[0].lower() in SKIPPED_SCHEMES:
                    continue

                ref = content.ref.resolve(value)
                mime_type = self._infer_mime_type(content, element, attr, ref)
                line, column = document.location(element)
                yield ref, mime_type, SourceLocation(
                    ref=content.ref,
                    line=line,
                    column=column,
                    attribute=attr.qualified_name,
                )

    def _infer_mime_type(self, content: Union[HtmlContent, SvgContent],
                         element: object, attr: ReferenceAttribute,
                         ref: Reference) -> str:
        explicit = content.document.attribute(element, 'type')
        if explicit and '/' in explicit:
            return explicit.strip()
        if attr.tag == 'script':
            return SCRIPT_MIME_TYPE
        return self.mime_table.guess_or_default(ref.target)
