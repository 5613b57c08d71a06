import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from wishub.errors import ApiError
from wishub.search.query import SearchResult, SearchSnapshot, search
from wishub.services.api_client import WisClient

logger = logging.getLogger(__name__)


class SearchIndexService:
    """
    Keeps a searchable snapshot of all four collections fresh by polling the API.

    A refresh fetches documents, both structures and the community posts
    concurrently and swaps the snapshot only if all four succeed. A failed
    refresh keeps the previous snapshot. A slow refresh can still land after
    a newer one; nothing de-duplicates them.
    """

    def __init__(
        self,
        client: WisClient,
        poll_interval: float = 3.0,
        on_refresh: Optional[Callable[[SearchSnapshot], None]] = None,
        auto_start: bool = False,
        max_workers: int = 4,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self._on_refresh = on_refresh or self._default_handler
        self._max_workers = max_workers
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self._snapshot = SearchSnapshot()
        self._backend_connected: Optional[bool] = None

        if auto_start:
            self.start()

    @property
    def snapshot(self) -> SearchSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def backend_connected(self) -> Optional[bool]:
        """None until the first refresh attempt, then whether the last one succeeded."""
        with self._lock:
            return self._backend_connected

    def refresh(self) -> bool:
        try:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                ui = pool.submit(self.client.get_structure, "ui")
                api = pool.submit(self.client.get_structure, "api")
                documents = pool.submit(self.client.list_documents)
                posts = pool.submit(self.client.list_posts)
                snapshot = SearchSnapshot(
                    ui_folders=tuple(ui.result()),
                    api_folders=tuple(api.result()),
                    documents=tuple(documents.result()),
                    discussions=tuple(posts.result()),
                )
        except ApiError as e:
            logger.error(f"Error loading search data from API: {e}")
            self._set_connected(False)
            return False

        with self._lock:
            self._snapshot = snapshot
        self._set_connected(True)

        try:
            self._on_refresh(snapshot)
        except Exception as e:
            logger.error(f"Error in on_refresh: {e}")
        return True

    def search(self, query: str) -> List[SearchResult]:
        return search(query, self.snapshot)

    def _set_connected(self, connected: bool) -> None:
        with self._lock:
            previous = self._backend_connected
            self._backend_connected = connected
        if previous is not connected:
            logger.info("Backend reachable" if connected else "Backend unreachable")

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                return

            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            self._is_running = False
            self._stop_event.set()

        if self._poll_thread is not None:
            self._poll_thread.join(timeout=self.poll_interval + 1.0)
            self._poll_thread = None

    def _poll_loop(self) -> None:
        # first refresh runs immediately, then every poll_interval
        while not self._stop_event.is_set():
            try:
                self.refresh()
            except Exception:
                logger.exception("Unexpected error refreshing search data")
                self._set_connected(False)
            self._stop_event.wait(self.poll_interval)

    @staticmethod
    def _default_handler(snapshot: SearchSnapshot) -> None:
        pass

    def __enter__(self) -> "SearchIndexService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
