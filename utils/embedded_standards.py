"""
Embedded default standards.

The baseline layer of the configuration cascade, always present and
used as-is when neither central standards nor a repository config can
be loaded.
"""

from models.rules import (
    Check,
    ListPattern,
    RegexPattern,
    RuleConfig,
    Severity,
)


def get_defaults() -> RuleConfig:
    """Return a fresh copy of the baseline rule configuration."""
    return RuleConfig(
        version=1,
        include_paths=["**/*.cs", "**/*.ts", "**/*.js", "**/*.py"],
        exclude_paths=["**/bin/**", "**/obj/**", "**/node_modules/**", "**/.venv/**"],
        checks=_default_checks(),
        pr_checks=[],
    )


def _default_checks() -> list[Check]:
    return [
        # Security
        Check(
            id="sec-001",
            applies_to=[".cs", ".ts", ".js", ".py"],
            severity=Severity.ERROR,
            description="Hardcoded secrets (API keys, passwords, connection strings)",
            guidance="Use a secret store or environment variables. Never commit secrets.",
            pattern=RegexPattern(
                value=r"(?i)(password|secret|apikey|api_key|connectionstring)\s*[=:]\s*[\"'][^\"']{8,}[\"']"
            ),
        ),
        Check(
            id="sec-002",
            applies_to=[".cs"],
            severity=Severity.ERROR,
            description="SQL injection risk - string concatenation in SQL",
            guidance="Use parameterized queries. Never concatenate user input into SQL.",
            pattern=RegexPattern(value=r"(SqlCommand|ExecuteSql|FromSqlRaw).*\+.*"),
        ),
        # Async
        Check(
            id="async-001",
            applies_to=[".cs"],
            severity=Severity.WARNING,
            description="Blocking calls in async code (.Result, .Wait(), .GetAwaiter().GetResult())",
            guidance="Use await instead of blocking; blocking can deadlock the thread pool.",
            pattern=ListPattern(value=[".Result", ".Wait(", ".GetAwaiter().GetResult()"]),
        ),
        Check(
            id="async-002",
            applies_to=[".cs"],
            severity=Severity.WARNING,
            description="Thread.Sleep in async code",
            guidance="Use await Task.Delay() instead of Thread.Sleep() in async methods.",
            pattern=RegexPattern(value=r"Thread\.Sleep\s*\("),
        ),
        # Error handling
        Check(
            id="err-001",
            applies_to=[".cs"],
            severity=Severity.WARNING,
            description="Empty catch block - exceptions should be handled or logged",
            guidance="Log exceptions or handle them appropriately.",
            pattern=RegexPattern(value=r"catch\s*\([^)]*\)\s*\{\s*\}"),
        ),
        Check(
            id="err-002",
            applies_to=[".py"],
            severity=Severity.WARNING,
            description="Bare except clause",
            guidance="Catch specific exception types; a bare except also swallows KeyboardInterrupt.",
            pattern=RegexPattern(value=r"^\s*except\s*:"),
        ),
        # Logging
        Check(
            id="log-001",
            applies_to=[".cs"],
            severity=Severity.INFO,
            description="Console.WriteLine in production code",
            guidance="Use structured logging; console output is not captured in production.",
            pattern=RegexPattern(value=r"Console\.(WriteLine|Write)\s*\("),
        ),
        # Code quality
        Check(
            id="qual-001",
            applies_to=[".cs", ".ts", ".js"],
            severity=Severity.INFO,
            description="TODO/FIXME/HACK comments should be addressed",
            guidance="Create work items for TODOs before merging to main branches.",
            pattern=RegexPattern(value=r"//\s*(TODO|FIXME|HACK|XXX)[\s:]"),
        ),
        # Configuration
        Check(
            id="cfg-001",
            applies_to=[".cs", ".ts", ".js"],
            severity=Severity.WARNING,
            description="Hardcoded URLs or endpoints",
            guidance="Read URLs and endpoints from configuration.",
            pattern=RegexPattern(value=r"\"https?://[^\"]+\""),
        ),
    ]
