# main.py
from __future__ import annotations
import time
import structlog
from clipflow.app.config import DB_PATH, ensure_dirs, load_settings
from clipflow.app.controller.runner import CaptureRuntime
from clipflow.app.logging_config import configure_logging
from clipflow.core.storage.item_store import ItemStore

def main() -> None:
    configure_logging(debug=True)
    log = structlog.get_logger()

    ensure_dirs()
    log.info("app.start", msg="Launching ClipFlow capture", db=str(DB_PATH))
    with ItemStore(DB_PATH) as store:
        runtime = CaptureRuntime(store, settings=load_settings())
        runtime.start()
        try:
            while True:
                time.sleep(1.0)
        except KeyboardInterrupt:
            pass
        finally:
            runtime.stop()
    log.info("app.stop", msg="Exited cleanly")

if __name__ == "__main__":
    main()
