from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

type Tree = dict[str, str]  # path -> content

class FileChange(BaseModel):
    path: str
    status: Literal["unmodified", "modified", "staged", "deleted"]
    content: str | None = None

class CommitInfo(BaseModel):
    id: str
    message: str
    parents: list[str] = []
    timestamp: int
    author: str
    changes: list[FileChange] = []
    tree: dict[str, str] = {}

type StagingInfo = dict[str, FileChange]

class BranchHead(BaseModel):
    type: Literal["branch"] = "branch"
    value: str  # branch name

class DetachedHead(BaseModel):
    type: Literal["commit"] = "commit"
    value: str  # commit id

HeadInfo = Annotated[BranchHead | DetachedHead, Field(discriminator="type")]

class StashEntry(BaseModel):
    id: str
    message: str
    index: dict[str, FileChange] = {}
    workingDirectory: dict[str, str] = {}
    timestamp: int

class MockServer(BaseModel):
    branches: dict[str, str] = {}
    commits: dict[str, CommitInfo] = {}

class RepoState(BaseModel):
    commits: dict[str, CommitInfo] = {}
    branches: dict[str, str] = {"main": ""}
    HEAD: HeadInfo = BranchHead(value="main")
    index: dict[str, FileChange] = {}
    workingDirectory: dict[str, str] = {}
    stash: list[StashEntry] = []  # last entry is the top of the stack
    remotes: dict[str, str] = {}
    remoteBranches: dict[str, str] = {}  # "<remote>/<branch>" -> commit id
    mockServers: dict[str, MockServer] = {}

class CommandResult(BaseModel):
    success: bool
    message: str = ""
    snapshot: RepoState | None = None

class ResetMode(str, Enum):
    SOFT = "soft"
    MIXED = "mixed"
    HARD = "hard"

class StashAction(str, Enum):
    PUSH = "push"
    POP = "pop"
    APPLY = "apply"
    LIST = "list"
