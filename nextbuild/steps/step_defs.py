from __future__ import annotations

from ..core.errors import StepNotFoundError
from ..core.model import StepDefinition


def _step(
    id: str,
    title: str,
    description: str,
    confirm: str,
    *,
    enabled: bool = True,
    show_output: bool = False,
) -> StepDefinition:
    return StepDefinition(
        id=id,
        title=title,
        description=description,
        confirm=confirm,
        default_enabled=enabled,
        default_output_visible=show_output,
    )


# Execution order.
STEPS: tuple[StepDefinition, ...] = (
    _step(
        "ssr_check",
        "SSR Environment Check",
        "Verify Node version, SSR env vars, and required configurations",
        "Run SSR environment check?",
        enabled=False,
    ),
    _step(
        "cleanup",
        "Cleanup Phase",
        "Remove node_modules, .next, .cache, and other build artifacts",
        "Proceed with cleanup?",
    ),
    _step(
        "security_audit",
        "Security Audit",
        "Check for vulnerable dependencies before installation",
        "Run security audit?",
    ),
    _step(
        "dependencies",
        "Dependency Management",
        "Install dependencies, handle version conflicts",
        "Install dependencies?",
    ),
    _step(
        "check_updates",
        "Dependency Updates Check",
        "Check for outdated dependencies and prompt to update",
        "Check for dependency updates?",
        show_output=True,
    ),
    _step(
        "optimize",
        "SSR Optimization",
        "Configure SSR-specific optimizations and browser compatibility",
        "Configure optimizations?",
    ),
    _step(
        "lint_checks",
        "Lint Checks",
        "Run ESLint and code quality checks",
        "Run lint checks?",
    ),
    _step(
        "type_checks",
        "Type Checks",
        "Run TypeScript compilation checks",
        "Run type checks?",
    ),
    _step(
        "build",
        "Production Build",
        "Execute production build with SSR configurations",
        "Start production build?",
    ),
    _step(
        "postbuild",
        "Post-Build Phase",
        "Post-build cleanup, permissions, and optimizations",
        "Run post-build tasks?",
    ),
    _step(
        "size_report",
        "Build Size Report",
        "Generate detailed report of build size changes",
        "Generate size report?",
        show_output=True,
    ),
    _step(
        "bundle_analyze",
        "Bundle Analysis",
        "Interactive bundle analysis with @next/bundle-analyzer",
        "Run bundle analysis?",
    ),
    _step(
        "permissions",
        "Fix Permissions",
        "Set correct file permissions for deployment",
        "Fix permissions?",
        enabled=False,
    ),
    _step(
        "docker_prep",
        "Docker Preparation",
        "Prepare Docker artifacts and optimize for containerization",
        "Prepare Docker artifacts?",
        enabled=False,
    ),
)


def list_steps() -> list[StepDefinition]:
    return list(STEPS)


def get_step(step_id: str) -> StepDefinition:
    for s in STEPS:
        if s.id == step_id:
            return s
    raise StepNotFoundError(step_id)
