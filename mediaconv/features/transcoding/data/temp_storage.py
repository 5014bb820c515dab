import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from mediaconv.core.config.settings import settings
from ..domain.exceptions import CleanupWarning, StagingError
from ..domain.interfaces import ITempStorage
from ..domain.models import StagedFilePair

logger = logging.getLogger(__name__)


class TempFileManager(ITempStorage):
    """
    Hands out collision-free paths in the staging directory.
    Names are random uuid4 hex, unique across processes sharing the directory.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else settings.TEMP_DIR
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"Staging directory unavailable: {self.base_dir}", self.base_dir) from e

    def allocate(self, extension: str) -> Path:
        # Names only; nothing is created until the caller writes
        suffix = extension.lstrip(".")
        name = f"{uuid.uuid4().hex}.{suffix}" if suffix else uuid.uuid4().hex
        return self.base_dir / name

    def release(self, path: Path) -> Optional[CleanupWarning]:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            warning = CleanupWarning(path, e)
            logger.warning(f"Cleanup error: {warning}")
            return warning
        return None

    @contextmanager
    def staged(self, input_extension: str, output_extension: str) -> Iterator[StagedFilePair]:
        pair = StagedFilePair(
            input_path=self.allocate(input_extension),
            output_path=self.allocate(output_extension),
        )
        logger.debug(f"Staged {pair.input_path.name} -> {pair.output_path.name}")
        try:
            yield pair
        finally:
            self.release(pair.input_path)
            self.release(pair.output_path)
