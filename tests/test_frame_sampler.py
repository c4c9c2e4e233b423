import pytest

from videoscript.core.errors import ValidationError
from videoscript.core.frame_sampler import compute_sample_frames, iter_frame_batches, iter_frame_states


def test_defaults_to_every_frame_in_span(package):
    assert compute_sample_frames(package.project, start_frame=10, end_frame=13) == [10, 11, 12]
    assert len(compute_sample_frames(package.project)) == package.project.duration_in_frames


def test_explicit_frames_are_filtered_and_deduplicated(package):
    assert compute_sample_frames(package.project, frames=[45, 5, 500, 5, -1]) == [5, 45]


def test_step_and_sample(package):
    assert compute_sample_frames(package.project, step=30) == [0, 30, 60, 90]
    assert compute_sample_frames(package.project, sample_count=5, end_frame=101) == [0, 25, 50, 75, 100]


def test_max_frames_caps_selection(package):
    assert compute_sample_frames(package.project, max_frames=2) == [0, 1]


def test_iter_frame_batches():
    assert list(iter_frame_batches(range(5), 2)) == [[0, 1], [2, 3], [4]]


def test_iter_frame_states_streams_in_order(package):
    states = list(iter_frame_states(package.project, package.prototypes, [40, 0]))
    assert [s.frame for s in states] == [40, 0]
    assert [s.composition_frame for s in states] == [30, 0]


def test_start_past_the_end_is_rejected(package):
    with pytest.raises(ValidationError):
        compute_sample_frames(package.project, sample_count=3, start_frame=130)
    with pytest.raises(ValidationError):
        compute_sample_frames(package.project, start_frame=120)


def test_non_positive_step_and_sample_are_rejected(package):
    with pytest.raises(ValidationError):
        compute_sample_frames(package.project, step=-5)
    with pytest.raises(ValidationError):
        compute_sample_frames(package.project, step=0)
    with pytest.raises(ValidationError):
        compute_sample_frames(package.project, sample_count=-1)


def test_samples_stay_inside_the_project(package):
    frames = compute_sample_frames(package.project, sample_count=5, start_frame=100, end_frame=300)
    assert len(frames) == 5
    assert frames[0] == 100
    assert frames[-1] == 119
    assert all(100 <= f < 120 for f in frames)
