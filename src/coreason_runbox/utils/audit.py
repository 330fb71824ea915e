import hashlib

from coreason_runbox.models import RunContext
from coreason_runbox.utils.logger import logger


class AuditLogger:
    """Audit trail for submitted code.

    Records a SHA-256 fingerprint of every snippet before it reaches a sandbox.
    """

    def __init__(self, enabled: bool = True):
        """Initializes the AuditLogger.

        Args:
            enabled: Whether to emit audit records.
        """
        self.enabled = enabled

    def log_run_start(self, ctx: RunContext, code: str) -> str:
        """Log the code execution attempt.

        Args:
            ctx: The run about to be launched.
            code: The code to be executed.

        Returns:
            str: The SHA-256 hash of the code.
        """
        code_hash = hashlib.sha256(code.encode("utf-8")).hexdigest()
        if self.enabled:
            logger.info(
                f"AUDIT: Executing python code. Hash: {code_hash}, Length: {len(code)}",
                run_id=ctx.run_id,
            )
        return code_hash
