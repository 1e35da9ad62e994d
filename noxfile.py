import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.run(
        "poetry",
        "install",
        "--all-extras",
        external=True,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run aggregate and adapter tests only (no threads, no BDD)."""
    _install(session)
    session.run(
        "pytest",
        "tests/shared/",
        "tests/catalogue/domain/",
        "tests/payments/domain/",
        "tests/identity/domain/",
        "tests/inventory/domain/",
        "tests/ordering/domain/",
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_concurrency(session: nox.Session) -> None:
    """Run the threaded reservation, checkout and cancellation tests on their own."""
    _install(session)
    session.run("pytest", "-m", "integration", "tests/inventory/integration/", "tests/ordering/integration/")
