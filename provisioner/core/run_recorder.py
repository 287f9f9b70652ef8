"""
Run record storage for provisioning results.
"""

import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List

from ..models.provision import ProvisionResult


class RunRecorder:
    """Writes provisioning results as JSON under a per-run directory."""

    def __init__(self, base_path: Path, run_id: Optional[str] = None):
        """
        Initialize run recorder.

        Args:
            base_path: Base directory for run records
            run_id: Optional run ID; defaults to the current UTC timestamp
        """
        self.logger = logging.getLogger(__name__)
        self.base_path = Path(base_path)
        self.run_id = run_id or datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        self.run_base_path = self.base_path / "runs" / self.run_id

    def save_json(self, filename: str, data: Dict[str, Any],
                  subdirs: Optional[List[str]] = None) -> Path:
        """
        Save JSON data to file.

        Args:
            filename: JSON filename
            data: Data to save
            subdirs: Optional subdirectories under the run directory

        Returns:
            Path to saved file
        """
        target_dir = self.run_base_path
        for subdir in subdirs or []:
            target_dir = target_dir / subdir
        target_dir.mkdir(parents=True, exist_ok=True)

        json_path = target_dir / filename

        if 'timestamp' not in data:
            data['timestamp'] = datetime.utcnow().isoformat()

        with open(json_path, 'w') as f:
            json.dump(data, f, indent=2, default=str)

        self.logger.info(f"Saved {filename} to {json_path}")
        return json_path

    def record(self, result: ProvisionResult) -> Optional[Path]:
        """Save a run result. Failures are logged, never raised."""
        data = result.model_dump(mode="json")
        data["exit_code"] = result.exit_code
        try:
            return self.save_json("provision_result.json", data)
        except OSError as e:
            self.logger.warning(f"Could not write run record: {e}")
            return None
