"""
Prompt Version Store

In-memory store for prompt projects and their versions. The store does not persist
anything itself: to_dict() / from_dict() hand a snapshot to whatever storage the
caller uses.
"""

from dataclasses import asdict
from datetime import datetime

from prompt_agent_core.domain.entities import (
    EvaluationRecord,
    PromptProject,
    PromptVersion,
    TestCase,
)

BEST_TAG = "best"


class PromptVersionStore:
    """Projects (newest first) and their versions (newest first)"""

    def __init__(self) -> None:
        self._projects: list[PromptProject] = []
        self._versions: dict[str, list[PromptVersion]] = {}

    # -- Projects --

    def list_projects(self) -> list[PromptProject]:
        return list(self._projects)

    def get_project(self, project_id: str) -> PromptProject | None:
        return next((p for p in self._projects if p.project_id == project_id), None)

    def create_project(self, name: str) -> PromptProject:
        project = PromptProject(name=name)
        self._projects.insert(0, project)
        self._versions[project.project_id] = []
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project together with all of its versions"""
        self._projects = [p for p in self._projects if p.project_id != project_id]
        self._versions.pop(project_id, None)

    def rename_project(self, project_id: str, name: str) -> PromptProject:
        project = self._require_project(project_id)
        project.name = name
        project.updated_at = datetime.now().isoformat()
        return project

    # -- Versions --

    def list_versions(self, project_id: str) -> list[PromptVersion]:
        return list(self._versions.get(project_id, []))

    def get_version(self, project_id: str, version_id: str) -> PromptVersion | None:
        return next((v for v in self._versions.get(project_id, []) if v.version_id == version_id), None)

    def save_version(
        self,
        project_id: str,
        system_prompt: str,
        question: str,
        expected_answer: str,
        stability_score: int | None = None,
        correctness_score: int | None = None,
        note: str = "",
    ) -> PromptVersion:
        """
        Save a new version; its number is one more than the highest existing number.

        Raises:
            KeyError: If the project does not exist
        """
        project = self._require_project(project_id)
        versions = self._versions.setdefault(project_id, [])
        next_number = max((v.version_number for v in versions), default=0) + 1

        version = PromptVersion(
            project_id=project_id,
            version_number=next_number,
            system_prompt=system_prompt,
            question=question,
            expected_answer=expected_answer,
            stability_score=stability_score,
            correctness_score=correctness_score,
            note=note,
        )
        versions.insert(0, version)

        project.current_version_id = version.version_id
        project.version_count = len(versions)
        project.updated_at = datetime.now().isoformat()
        return version

    def save_round(self, project_id: str, record: EvaluationRecord, test_case: TestCase) -> PromptVersion:
        """Save the prompt a completed round was run with, together with its scores"""
        return self.save_version(
            project_id,
            system_prompt=record.previous_prompt,
            question=test_case.question,
            expected_answer=test_case.expected_answer,
            stability_score=record.stability_score,
            correctness_score=record.correctness_score,
            note=f"Round {record.round}",
        )

    def update_version_tags(self, project_id: str, version_id: str, tags: list[str]) -> None:
        """Replace a version's tags; the "best" tag is held by at most one version"""
        version = self.get_version(project_id, version_id)
        if version is None:
            raise KeyError(f"Unknown version: {version_id}")
        if BEST_TAG in tags:
            for other in self._versions[project_id]:
                if other.version_id != version_id and BEST_TAG in other.tags:
                    other.tags.remove(BEST_TAG)
        version.tags = list(tags)

    def get_best_version(self, project_id: str) -> PromptVersion | None:
        """The version tagged "best", else the newest one"""
        versions = self._versions.get(project_id, [])
        return next((v for v in versions if v.is_best), versions[0] if versions else None)

    # -- Snapshot --

    def to_dict(self) -> dict:
        return {
            "projects": [asdict(p) for p in self._projects],
            "versions": {
                project_id: [asdict(v) for v in versions]
                for project_id, versions in self._versions.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PromptVersionStore":
        store = cls()
        store._projects = [PromptProject(**p) for p in data.get("projects", [])]
        store._versions = {
            project_id: [PromptVersion(**v) for v in versions]
            for project_id, versions in data.get("versions", {}).items()
        }
        return store

    def _require_project(self, project_id: str) -> PromptProject:
        project = self.get_project(project_id)
        if project is None:
            raise KeyError(f"Unknown project: {project_id}")
        return project
