from __future__ import annotations

from ..core.model import DECLINE_SKIP, CommandSpec, FollowUp, StepExecution, StepRecipe
from .step_cleanup import cleanup_runner
from .step_optimize import next_config_runner
from .step_ssr_check import ssr_check_runner


NCU_UP_TO_DATE = "All dependencies match"


def _npm(label: str, *args: str, **kwargs) -> CommandSpec:
    return CommandSpec(label=label, argv=("npm", *args), **kwargs)


def _updates_available(execution: StepExecution) -> bool:
    ncu = execution.results.get("ncu")
    return ncu is not None and NCU_UP_TO_DATE not in ncu.output


def _ncu_missing(execution: StepExecution) -> bool:
    return "ncu" in execution.missing_tools


_NPM_OUTDATED = _npm("npm outdated", "outdated", decisive=False)


RECIPES: dict[str, StepRecipe] = {
    "ssr_check": StepRecipe(
        commands=(CommandSpec(label="ssr check", internal=ssr_check_runner),),
        follow_ups=(
            FollowUp(
                prompt="Continue with unsupported Node.js version?",
                ci_accepts=False,
                on_decline=DECLINE_SKIP,
            ),
        ),
    ),
    "cleanup": StepRecipe(
        commands=(CommandSpec(label="cleanup", internal=cleanup_runner),),
    ),
    "security_audit": StepRecipe(
        commands=(_npm("npm audit", "audit"),),
        follow_ups=(
            FollowUp(
                prompt="Security audit found vulnerabilities. Attempt to fix?",
                commands=(_npm("npm audit fix", "audit", "fix", "--force"),),
            ),
        ),
    ),
    "dependencies": StepRecipe(
        commands=(_npm("npm install", "install"),),
    ),
    "check_updates": StepRecipe(
        commands=(
            _NPM_OUTDATED,
            CommandSpec(label="ncu", argv=("ncu", "--color"), requires_tool="ncu"),
        ),
        follow_ups=(
            FollowUp(
                prompt="Install these updates using ncu?",
                when=_updates_available,
                commands=(
                    CommandSpec(label="ncu -u", argv=("ncu", "-u")),
                    _npm("npm install", "install"),
                ),
            ),
            FollowUp(
                prompt="Install npm-check-updates?",
                when=_ncu_missing,
                commands=(_npm("install ncu", "install", "-g", "npm-check-updates"),),
                warn_on_success=True,
            ),
        ),
        force_commands=(_NPM_OUTDATED,),
        force_note="Skipping automatic updates in --force mode",
    ),
    "optimize": StepRecipe(
        commands=(
            CommandSpec(label="next.config.js", internal=next_config_runner),
            CommandSpec(label="browserslist", argv=("npx", "update-browserslist-db@latest", "--yes")),
        ),
    ),
    "lint_checks": StepRecipe(
        commands=(_npm("npm run lint", "run", "lint"),),
    ),
    "type_checks": StepRecipe(
        commands=(_npm("npm run typecheck", "run", "typecheck"),),
    ),
    "build": StepRecipe(
        commands=(_npm("npm run build", "run", "build", env={"NODE_ENV": "production"}),),
    ),
    "postbuild": StepRecipe(
        commands=(_npm("npm prune", "prune", "--omit=dev"),),
    ),
    "size_report": StepRecipe(
        commands=(
            CommandSpec(label="du .next", argv=("du", "-sh", ".next"), decisive=False),
            CommandSpec(label="du .next/static", argv=("du", "-sh", ".next/static/*"), expand_globs=True),
        ),
    ),
    "bundle_analyze": StepRecipe(
        commands=(
            _npm("install analyzer", "install", "--no-save", "@next/bundle-analyzer"),
            _npm("analyze build", "run", "build", env={"ANALYZE": "1"}),
        ),
    ),
    "permissions": StepRecipe(
        commands=(CommandSpec(label="fix permissions", argv=("fixnodePermissions.sh", "{target}")),),
        requires_tool="fixnodePermissions.sh",
    ),
    "docker_prep": StepRecipe(
        commands=(CommandSpec(label="docker build", argv=("docker", "build", "-t", "nextjs-ssr", ".")),),
        requires_file="Dockerfile",
    ),
}


def recipes() -> dict[str, StepRecipe]:
    return dict(RECIPES)
