"""
Episode Studio Logging System

Clean terminal lines for pipeline progress + JSONL debug files for agent
I/O and LLM API calls.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Any, Dict


class EpisodeStudioLogger:
    """
    Two-mode logging system:
    - Terminal: timestamped pipeline events through the standard logging module
    - Debug files: structured JSONL for agent I/O and API calls (opt-in via settings)
    """

    def __init__(self, settings=None):
        self.settings = settings
        self._log = logging.getLogger("episode_studio.pipeline")

        if settings and (settings.debug_agent_io or settings.debug_api_calls):
            self.debug_log_dir = Path(settings.debug_log_dir)
            self.debug_log_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            if settings.debug_agent_io:
                self.agent_io_log = self.debug_log_dir / f"agent_io_{timestamp}.jsonl"
            if settings.debug_api_calls:
                self.api_calls_log = self.debug_log_dir / f"api_calls_{timestamp}.jsonl"

    # ===== Terminal Output Methods =====

    def stage_started(self, run_id: str, stage: str):
        self._log.info(f"▶️  [{run_id[:8]}] {stage} started")

    def stage_completed(self, run_id: str, stage: str, duration: Optional[float] = None):
        msg = f"✅ [{run_id[:8]}] {stage} completed"
        if duration is not None:
            msg += f" in {duration:.1f}s"
        self._log.info(msg)

    def stage_failed(self, run_id: str, stage: str, error: Exception):
        self._log.error(f"❌ [{run_id[:8]}] {stage} failed: {type(error).__name__}: {error}")

    def delivery(self, run_id: str, success: bool, channel: Optional[str], error: Optional[str] = None):
        if success:
            self._log.info(f"📨 [{run_id[:8]}] Delivered via {channel}")
        else:
            self._log.warning(f"📭 [{run_id[:8]}] Delivery failed: {error}")

    # ===== Debug Logging Methods =====

    def _write_json_log(self, log_file: Path, data: Dict[str, Any]):
        try:
            with open(log_file, 'a', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
                f.write('\n')
        except OSError as e:
            self._log.error(f"Failed to write JSON log: {e}")

    def _truncate_data(self, data: Any, max_length: int = 500) -> str:
        data_str = str(data)
        if len(data_str) > max_length:
            return data_str[:max_length] + f"... ({len(data_str)} chars total)"
        return data_str

    def agent_input(self, agent_name: str, prompt: str):
        """Log what an agent receives"""
        if not self.settings or not self.settings.debug_agent_io:
            return

        self._log.debug(f"📥 {agent_name} INPUT ({len(prompt)} chars)")
        if hasattr(self, 'agent_io_log'):
            self._write_json_log(self.agent_io_log, {
                "timestamp": datetime.now().isoformat(),
                "type": "agent_input",
                "agent": agent_name,
                "prompt": self._truncate_data(prompt),
            })

    def agent_output(self, agent_name: str, output: Any, status: str = "success",
                     duration: Optional[float] = None):
        """Log what an agent produced"""
        if not self.settings or not self.settings.debug_agent_io:
            return

        output_size = len(str(output)) if output else 0
        self._log.debug(f"📤 {agent_name} OUTPUT: {status} ({output_size} chars)")
        if hasattr(self, 'agent_io_log'):
            self._write_json_log(self.agent_io_log, {
                "timestamp": datetime.now().isoformat(),
                "type": "agent_output",
                "agent": agent_name,
                "status": status,
                "output_preview": self._truncate_data(output, 300),
                "output_size": output_size,
                "duration_seconds": duration,
            })

    def llm_api_call(self, model: str, prompt_tokens: int = 0, completion_tokens: int = 0,
                     latency: Optional[float] = None, status: str = "success"):
        """Log one LLM API call with token usage"""
        if not self.settings or not self.settings.debug_api_calls:
            return

        total_tokens = prompt_tokens + completion_tokens
        latency_str = f" in {latency:.1f}s" if latency else ""
        self._log.debug(f"🤖 API {model}: {total_tokens} tokens{latency_str}")
        if hasattr(self, 'api_calls_log'):
            self._write_json_log(self.api_calls_log, {
                "timestamp": datetime.now().isoformat(),
                "type": "llm_api_call",
                "model": model,
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": total_tokens,
                "latency_seconds": latency,
                "status": status,
            })


# Global logger instance
_logger: Optional[EpisodeStudioLogger] = None


def get_logger(settings=None) -> EpisodeStudioLogger:
    """Get global logger instance"""
    global _logger
    if _logger is None:
        _logger = EpisodeStudioLogger(settings=settings)
    return _logger


def init_logger(settings=None) -> EpisodeStudioLogger:
    """Initialize logger with specific settings"""
    global _logger
    _logger = EpisodeStudioLogger(settings=settings)
    return _logger
