# src/app.py          <-- keep it at the top level of the ZIP
# Handler path:  app.handler
#
# What it does:
#   • Re-exports the Powertools-wrapped SQS handler from the queue_worker package
#   • Lets the function keep the short handler path regardless of package layout

from queue_worker.app import handler

__all__ = ["handler"]
