"""Write the results of a workflow run to disk."""

from __future__ import annotations

import re
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML

from painflow.pipeline.stages import DEPLOYMENT_PREP, StageStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from painflow.pipeline.context import WorkflowContext
    from painflow.pipeline.stages import Stage

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9._-]+")


class RunWriteError(Exception):
    """Raised when run output can't be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write run output at {path}: {reason}")


class RunWriter:
    """Write completed stage results under an output directory.

    Layout::

        <output>/input.txt
        <output>/<stage-id>.yaml          one per completed stage
        <output>/manifests/<agent>.yaml   one per generated manifest
        <output>/deploy.sh                when deployment-prep completed
    """

    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path
        self._yaml = YAML()
        self._yaml.default_flow_style = False
        self._yaml.indent(mapping=2, sequence=4, offset=2)

    def write(self, stages: Sequence[Stage], context: WorkflowContext) -> list[Path]:
        """Write every completed stage of a run.

        Args:
            stages: Final stage snapshot.
            context: Final context snapshot.

        Returns:
            Paths written, in order.

        Raises:
            RunWriteError: If a file can't be written.
        """
        written: list[Path] = []
        try:
            self.output_path.mkdir(parents=True, exist_ok=True)
            input_path = self.output_path / "input.txt"
            input_path.write_text(context.user_input + "\n", encoding="utf-8")
            written.append(input_path)

            for stage in stages:
                if stage.status != StageStatus.COMPLETED:
                    continue
                written.append(self._dump(self.output_path / f"{stage.id}.yaml", stage.result))
                if stage.id == DEPLOYMENT_PREP and isinstance(stage.result, dict):
                    script = stage.result.get("deploymentScript")
                    if isinstance(script, str) and script:
                        written.append(self._write_script(script))

            if context.manifest:
                written.extend(self._write_manifests(context.manifest))
        except OSError as e:
            raise RunWriteError(self.output_path, str(e)) from e

        return written

    def _write_manifests(self, manifest: dict[str, Any]) -> list[Path]:
        manifests_dir = self.output_path / "manifests"
        manifests_dir.mkdir(parents=True, exist_ok=True)
        paths: list[Path] = []
        for index, agent in enumerate(manifest.get("agents") or []):
            if not isinstance(agent, dict) or "manifest" not in agent:
                continue
            name = _UNSAFE_NAME.sub("-", str(agent.get("name") or f"agent-{index + 1}"))
            paths.append(self._dump(manifests_dir / f"{name}.yaml", agent["manifest"]))
        return paths

    def _write_script(self, script: str) -> Path:
        path = self.output_path / "deploy.sh"
        path.write_text(script, encoding="utf-8")
        path.chmod(0o755)
        return path

    def _dump(self, path: Path, data: Any) -> Path:
        with path.open("w", encoding="utf-8") as f:
            self._yaml.dump(data, f)
        return path
