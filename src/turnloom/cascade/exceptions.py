from typing import List


class CascadeError(Exception):
    """Base exception for enrichment registry integrity violations"""
    pass


class MissingModuleError(CascadeError):
    """A root or dependency id is not registered"""
    def __init__(self, module_id: str, required_by: str | None = None):
        self.module_id = module_id
        self.required_by = required_by
        if required_by:
            message = f"Module '{module_id}' (required by '{required_by}') is not registered"
        else:
            message = f"Module '{module_id}' is not registered"
        super().__init__(message)


class CircularDependencyError(CascadeError):
    """A module was reached again while it was still on the traversal path"""
    def __init__(self, module_id: str, path: List[str]):
        self.module_id = module_id
        self.path = path
        super().__init__(f"Circular dependency detected at '{module_id}': {' -> '.join(path)}")


class DependencyInjectionError(CascadeError):
    """A required dependency had no result when its dependent was about to run"""
    def __init__(self, module_id: str, dependency_id: str):
        self.module_id = module_id
        self.dependency_id = dependency_id
        super().__init__(f"Module '{module_id}' requires '{dependency_id}' but no result is available")
