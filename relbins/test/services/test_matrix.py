from __future__ import annotations

from relbins.core.config import MatrixCategory, MatrixConfig
from relbins.services.matrix import JobSpec, expand_matrix


def _matrix(*categories: MatrixCategory) -> MatrixConfig:
    return MatrixConfig(categories=categories)


def test_single_pair() -> None:
    jobs = expand_matrix(
        _matrix(
            MatrixCategory(
                name="release-bins",
                targets=("x86_64-unknown-linux-musl",),
                bins=("spotter",),
            )
        )
    )
    assert jobs == (
        JobSpec(bin="spotter", target="x86_64-unknown-linux-musl", category="release-bins"),
    )


def test_product_is_targets_outer_bins_inner() -> None:
    jobs = expand_matrix(
        _matrix(MatrixCategory(name="c", targets=("t1", "t2"), bins=("a", "b")))
    )
    assert [(j.bin, j.target) for j in jobs] == [
        ("a", "t1"),
        ("b", "t1"),
        ("a", "t2"),
        ("b", "t2"),
    ]


def test_size_equals_configured_pairs() -> None:
    matrix = _matrix(
        MatrixCategory(name="linux", targets=("t1", "t2", "t3"), bins=("a", "b")),
        MatrixCategory(name="extra", include=(("c", "t9"),)),
    )
    jobs = expand_matrix(matrix)
    assert len(jobs) == 7


def test_include_pairs_follow_product_and_duplicates_collapse() -> None:
    category = MatrixCategory(
        name="c",
        targets=("t1",),
        bins=("a",),
        include=(("a", "t1"), ("b", "t2")),
    )
    assert [(j.bin, j.target) for j in expand_matrix(_matrix(category))] == [
        ("a", "t1"),
        ("b", "t2"),
    ]


def test_categories_keep_declaration_order() -> None:
    jobs = expand_matrix(
        _matrix(
            MatrixCategory(name="second", include=(("b", "t"),)),
            MatrixCategory(name="first", include=(("a", "t"),)),
        )
    )
    assert [j.category for j in jobs] == ["second", "first"]


def test_expansion_is_deterministic() -> None:
    matrix = _matrix(MatrixCategory(name="c", targets=("t1", "t2"), bins=("a", "b")))
    assert expand_matrix(matrix) == expand_matrix(matrix)


def test_empty_matrix() -> None:
    assert expand_matrix(MatrixConfig()) == ()


def test_job_spec_helpers() -> None:
    job = JobSpec(bin="spotter", target="x86_64-pc-windows-gnu")
    assert job.label == "spotter-x86_64-pc-windows-gnu"
    assert job.archive_name == "spotter-x86_64-pc-windows-gnu.tar.gz"
    assert job.is_windows is True
    assert JobSpec(bin="spotter", target="aarch64-apple-darwin").is_windows is False
