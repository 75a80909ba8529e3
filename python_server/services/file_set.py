from typing import Dict, Iterable, Iterator, List, Optional

from models.schemas import GeneratedFile


class FileSet:
    """
    Ordered collection of generated files with unique filenames.

    Duplicate filenames inside one install are resolved last-write-wins: the
    later entry's content replaces the earlier one, which keeps its position.
    """

    def __init__(self, files: Iterable[GeneratedFile] = ()):
        self._files: List[GeneratedFile] = []
        self._index: Dict[str, int] = {}
        self.replace(files)

    def replace(self, new_files: Iterable[GeneratedFile]):
        files: List[GeneratedFile] = []
        index: Dict[str, int] = {}
        for f in new_files:
            if not isinstance(f, GeneratedFile):
                f = GeneratedFile.model_validate(f)
            if f.filename in index:
                files[index[f.filename]] = f
            else:
                index[f.filename] = len(files)
                files.append(f)
        # Swap in one step so readers never see a half-built set
        self._files, self._index = files, index

    def find(self, filename: str) -> Optional[GeneratedFile]:
        pos = self._index.get(filename)
        return None if pos is None else self._files[pos]

    def resolve_reference(self, ref: str) -> Optional[GeneratedFile]:
        """Resolve a script/style reference from an HTML page: exact name, or name after a leading './'."""
        found = self.find(ref)
        if found is None and ref.startswith("./"):
            found = self.find(ref[2:])
        return found

    def filenames(self) -> List[str]:
        return [f.filename for f in self._files]

    def to_list(self) -> List[GeneratedFile]:
        return list(self._files)

    def __iter__(self) -> Iterator[GeneratedFile]:
        return iter(list(self._files))

    def __len__(self) -> int:
        return len(self._files)

    def __bool__(self) -> bool:
        return bool(self._files)

    def __contains__(self, filename: str) -> bool:
        return filename in self._index


class FileSelection:
    """Which file is active in the code viewer. Kept apart from the FileSet itself."""

    def __init__(self):
        self.selected: Optional[str] = None

    def select(self, file_set: FileSet, filename: str) -> bool:
        if filename not in file_set:
            return False
        self.selected = filename
        return True

    def revalidate(self, file_set: FileSet) -> Optional[str]:
        """Fall back to the first file whenever the selected one has disappeared."""
        if self.selected is not None and self.selected in file_set:
            return self.selected
        names = file_set.filenames()
        self.selected = names[0] if names else None
        return self.selected
