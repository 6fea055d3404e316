"""
nrseg Package.

Inserts New Relic segments into every Go function and method. Each body
receives two deferred statements that start a segment on entry and end it on
exit::

    defer newrelic.FromContext(ctx).StartSegment("slow").End()
    defer newrelic.FromContext(req.Context()).StartSegment("slow").End()

The import of ``github.com/newrelic/go-agent/v3/newrelic`` is added when
missing; an existing alias is reused.

Usage
-----

.. code-block:: python

    import nrseg
    src = b"package p\n\nfunc F() {}\n"
    out = nrseg.transform("p.go", src)

Batch callers that prefer results over exceptions use the engine:

.. code-block:: python

    from nrseg import SegmentEngine, RuntimeConfig

    engine = SegmentEngine(RuntimeConfig(reconciler_command=None))
    res = engine.run("p.go", src)
    if not res.success:
        print(res.errors)
"""

from nrseg.config import RuntimeConfig
from nrseg.core.conversion_result import ConversionResult
from nrseg.core.engine import SegmentEngine, transform
from nrseg.core.errors import (
  FormatError,
  ImportReconcileError,
  ImportResolutionError,
  NrsegError,
  ParseError,
)

__version__ = "0.1.0"
__revision__ = "HEAD"

__all__ = [
  "ConversionResult",
  "FormatError",
  "ImportReconcileError",
  "ImportResolutionError",
  "NrsegError",
  "ParseError",
  "RuntimeConfig",
  "SegmentEngine",
  "transform",
  "__version__",
]
