from kawatte.application.orchestrator import FileResult, Orchestrator, RunSummary

__all__ = ["FileResult", "Orchestrator", "RunSummary"]
