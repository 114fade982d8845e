"""The fixed CI/CD maturity rubric."""

from __future__ import annotations

from functools import partial
from typing import Iterable

from . import composite, deployed, pipeline_content, presence, run_history, settings
from .base import Category, ProbeDefinition, ProbeRegistry

F, I, A = Category.FUNDAMENTALS, Category.INTERMEDIATE, Category.ADVANCED


def default_probes(deploy_timeout_ms: int = deployed.DEPLOY_TIMEOUT_MS) -> list[ProbeDefinition]:
    """Built-in probes in display order. Total: 130 points."""
    return [
        # Fundamentals
        ProbeDefinition(
            "pipeline_exists", 5, F, "Pipeline exists", pipeline_content.pipeline_exists,
            description="At least one workflow file under .github/workflows.",
            fix="Add .github/workflows/ci.yml triggered on push and pull_request.",
        ),
        ProbeDefinition(
            "pipeline_green", 5, F, "Pipeline green on main", run_history.pipeline_green,
            description="The latest workflow run on the default branch concluded with success.",
            fix="Fix the failing job and push to the default branch.",
        ),
        ProbeDefinition(
            "lint_pass", 5, F, "Lint step in pipeline", pipeline_content.lint_pass,
            description="A workflow runs a linter (ruff, flake8, pylint, eslint, prettier...).",
            fix="Add a lint job, e.g. `ruff check .` or `npx eslint .`.",
        ),
        ProbeDefinition(
            "no_secrets_in_code", 5, F, "No hardcoded secrets", composite.no_secrets_in_code,
            description="Well-known entry points contain no credential-shaped literals. Missing files pass.",
            fix="Move secrets to environment variables or repository secrets and rotate leaked ones.",
        ),
        ProbeDefinition(
            "tests_exist", 10, F, "Tests exist in pipeline", composite.tests_exist,
            description="Test files exist and a workflow invokes a test runner.",
            fix="Add tests (tests/test_*.py, *.test.js) and run pytest/jest in CI.",
        ),
        ProbeDefinition(
            "tests_pass", 5, F, "Tests pass", run_history.tests_pass,
            description="Latest run is green and its test/ci/build job succeeded.",
            fix="Name the job that runs tests with 'test', 'ci' or 'build' and keep it green.",
        ),
        ProbeDefinition(
            "coverage_70", 10, F, "Coverage ≥ 70%", composite.coverage_70,
            description=(
                "A workflow measures coverage and the latest run is green. "
                "The percentage is not parsed; the green pipeline stands in for the threshold."
            ),
            fix="Run tests with --cov and --cov-fail-under=70 (or jest --coverage with a threshold).",
        ),
        ProbeDefinition(
            "dockerfile_exists", 5, F, "Dockerfile exists", presence.dockerfile_exists,
            description="A Dockerfile at the repository root.",
            fix="Add a Dockerfile at the repository root.",
        ),
        ProbeDefinition(
            "docker_builds", 5, F, "Docker build in CI", pipeline_content.docker_builds,
            description="A workflow builds the Docker image.",
            fix="Add `docker build .` or docker/build-push-action to a workflow.",
        ),
        # Intermediate
        ProbeDefinition(
            "security_scan", 10, I, "Security scan in CI", pipeline_content.security_scan,
            description="A workflow runs a security scanner (trivy, bandit, snyk, codeql, gitleaks...).",
            fix="Add a scanner job, e.g. aquasecurity/trivy-action or `pip-audit`.",
        ),
        ProbeDefinition(
            "ghcr_published", 10, I, "Image on GHCR", pipeline_content.ghcr_published,
            description="A container package is published, or a workflow pushes to ghcr.io.",
            fix="Log in to ghcr.io and push the image from CI.",
        ),
        ProbeDefinition(
            "quality_gate", 10, I, "Quality gate (SonarCloud etc.)", pipeline_content.quality_gate,
            description="A workflow uses sonar/codeclimate/codecov, or Sonar config is committed.",
            fix="Add SonarCloud or Codecov to CI.",
        ),
        ProbeDefinition(
            "deployed", 10, I, "App deployed (HTTP 200)",
            partial(deployed.check, timeout_ms=deploy_timeout_ms),
            description="The roster deploy_url answers GET with a 2xx status.",
            fix="Deploy the app and add deploy_url to the roster.",
        ),
        # Advanced
        ProbeDefinition(
            "branch_protection", 5, A, "Branch protection on main", settings.branch_protection,
            description="The default branch requires a pull request review before merge.",
            fix="Settings → Branches → add a rule requiring pull request reviews.",
        ),
        ProbeDefinition(
            "auto_deploy", 10, A, "Auto-deploy on push to main", pipeline_content.auto_deploy,
            description="A workflow deploys (render, fly.io, railway...) on push to main.",
            fix="Add a deploy job triggered on push to main.",
        ),
        ProbeDefinition(
            "multi_env", 10, A, "Multiple environments", pipeline_content.multi_env,
            description="A workflow declares at least two environments (staging, production...).",
            fix="Deploy to staging then production using `environment:` on the jobs.",
        ),
        ProbeDefinition(
            "pipeline_fast", 5, A, "Pipeline < 3 minutes", run_history.pipeline_fast,
            description="Mean duration of the last 3 successful runs is under 3 minutes.",
            fix="Cache dependencies and parallelise jobs.",
        ),
        ProbeDefinition(
            "dependabot", 5, A, "Dependabot/Renovate configured", presence.dependabot,
            description="Dependabot or Renovate configuration is committed.",
            fix="Add .github/dependabot.yml.",
        ),
    ]


def build_registry(
    extra: Iterable[ProbeDefinition] = (),
    deploy_timeout_ms: int = deployed.DEPLOY_TIMEOUT_MS,
) -> ProbeRegistry:
    """Built-ins followed by any extra probes. Raises ValueError on duplicate ids."""
    return ProbeRegistry([*default_probes(deploy_timeout_ms), *extra])
