"""
Optsmith document splicer: replace the sentinel-delimited region of a document.

    some manual text
    <!-- start options doc (DO NOT EDIT BY HAND) -->
    ... replaced on every run ...
    <!-- end options doc -->
    more manual text

Behavior
- lines are matched after trimming; every line outside the replaced region is
  copied byte-for-byte (including its line ending).
- the sentinel lines themselves are kept, so splicing a spliced document again
  replaces the previous block.
- only the first start sentinel is honored (at most one replacement).
- no start sentinel: the document is returned unchanged.
- start sentinel without an end sentinel: the block is inserted after the start
  line and the following lines are kept.
- with strict=True both situations raise SpliceError instead; otherwise a
  warning is logged.
"""
import logging

from .faults import FaultCode, SpliceError
from .renderer import Format

logger = logging.getLogger(__name__)

START = "<!-- start options doc (DO NOT EDIT BY HAND) -->"
END = "<!-- end options doc -->"


def _newline(line):
    for ending in ("\r\n", "\n", "\r"):
        if line.endswith(ending):
            return ending
    return ""


class Splicer:
    """
    Sentinel pair plus splicing policy.

    Parameters
    - start / end: sentinel lines (compared after trimming)
    - strict: raise SpliceError when a sentinel is missing
    """

    def __init__(self, start=START, end=END, /, *, strict=False):
        if not start.strip() or not end.strip():
            raise ValueError("splicer sentinels cannot be blank")
        if start.strip() == end.strip():
            raise ValueError("splicer sentinels must differ")
        self._start = start.strip()
        self._end = end.strip()
        self._strict = bool(strict)

    @classmethod
    def for_format(cls, format, /, *, strict=False):
        """
        splicer whose sentinels carry the comment marker of `format` ("* <!-- start ...").
        """
        marker = Format.lookup(format).marker or ""
        return cls(marker + START, marker + END, strict=strict)

    @property
    def start(self):
        return self._start

    @property
    def end(self):
        return self._end

    def locate(self, document, /):
        """
        (start, end) 0-based line numbers of the sentinels that splice() would use;
        either may be None.
        """
        start = end = None
        for number, line in enumerate(document.splitlines()):
            stripped = line.strip()
            if start is None:
                if stripped == self._start:
                    start = number
            elif stripped == self._end:
                end = number
                break
        return start, end

    def splice(self, document, block, /):
        """
        Return `document` with the region between the sentinels replaced by `block`.

        `block` is a string, or a callable receiving the start sentinel line (as it
        appears in the document) and returning the string; comment formats use it to
        indent the block under the marker.
        """
        output = []
        discarded = []
        replacing = False
        replaced = False

        for line in document.splitlines(keepends=True):
            stripped = line.strip()
            if replacing:
                if stripped != self._end:
                    discarded.append(line)
                    continue
                replacing = False
                discarded.clear()
            output.append(line)

            if not replaced and stripped == self._start:
                newline = _newline(line) or "\n"
                if not _newline(line):
                    output[-1] = line + newline
                text = block(line.rstrip("\r\n")) if callable(block) else block
                if text:
                    output.append(newline.join(text.splitlines()) + newline)
                replaced = True
                replacing = True

        if not replaced:
            if self._strict:
                raise SpliceError(
                    "start sentinel %r not found" % self._start,
                    title="missing sentinel",
                    code=FaultCode.MISSING_SENTINEL,
                    sentinel=self._start,
                    hint="add the line %r where the documentation belongs" % self._start,
                )
            logger.warning("start sentinel %r not found; document left unchanged", self._start)
            return document

        if replacing:
            if self._strict:
                raise SpliceError(
                    "end sentinel %r not found after the start sentinel" % self._end,
                    title="missing sentinel",
                    code=FaultCode.MISSING_SENTINEL,
                    sentinel=self._end,
                    hint="add the line %r after the generated block" % self._end,
                )
            logger.warning("end sentinel %r not found; block inserted after the start sentinel", self._end)
            output.extend(discarded)

        logger.debug("spliced block into a document of %d lines", len(output))
        return "".join(output)


def splice(document, block, /, *, start=START, end=END, strict=False):
    """
    Splice `block` between the sentinels of `document` (see Splicer.splice).
    """
    return Splicer(start, end, strict=strict).splice(document, block)


__all__ = (
    "START",
    "END",
    "Splicer",
    "splice",
)
