"""Tests for the drag and resize state machine."""

import random
from datetime import date

import pytest

from barplanner.interaction import DragMode, InteractionController
from barplanner.models import (
    DayWindow,
    HourWindow,
    MultiScaleSchedule,
    Project,
    Scale,
    ScaleInterval,
    Task,
)
from barplanner.schedule import ScheduleModel


def make_project(scale=Scale.DAY, **fields):
    return Project("p1", "Site", date(2024, 4, 1), date(2024, 5, 1), scale=scale, **fields)


def day_task(start, end):
    return Task("t1", "p1", "配管", schedule=MultiScaleSchedule(day=ScaleInterval(start, end)))


@pytest.fixture
def controller():
    """Controller for the day scale with 32px cells and a 7-day window."""
    return InteractionController.for_project(make_project(), cell_width=32)


class TestMove:
    """Tests for moving a bar."""

    def test_move_keeps_duration(self, controller):
        """Test dragging a 2-4 bar to column 6 of a 7-day window."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        updated = controller.move(5 * 32)
        assert updated.schedule.day == ScaleInterval(5, 7)

    def test_move_clamps_to_start(self, controller):
        """Test dragging past the left edge."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        assert controller.move(-100).schedule.day == ScaleInterval(1, 3)

    def test_move_uses_origin_duration(self, controller):
        """Test that successive frames keep the original duration."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        controller.move(6 * 32)
        updated = controller.move(2 * 32)
        assert updated.schedule.day == ScaleInterval(3, 5)

    def test_move_leaves_other_scales(self, controller):
        """Test that a day-scale drag does not touch the hour scale."""
        task = Task(
            "t1",
            "p1",
            "配管",
            schedule=MultiScaleSchedule(hour=ScaleInterval(600, 660), day=ScaleInterval(2, 4)),
        )
        controller.press(task, DragMode.MOVE)
        assert controller.move(3 * 32).schedule.hour == ScaleInterval(600, 660)

    def test_move_longer_than_shrunk_window(self):
        """Test that a bar longer than a narrowed day window fills the window."""
        project = make_project(day_window=DayWindow(day_length=3))
        controller = InteractionController.for_project(project, cell_width=32)
        model = ScheduleModel.for_project(project)

        controller.press(day_task(1, 7), DragMode.MOVE)
        interval = controller.move(64).schedule.day
        assert interval == ScaleInterval(1, 3)
        assert model.is_valid(interval, Scale.DAY)

    def test_move_longer_than_shrunk_hour_window(self):
        """Test the same on a one-hour window."""
        project = make_project(Scale.HOUR, hour_window=HourWindow(8, 9))
        controller = InteractionController.for_project(project, cell_width=32)
        task = Task(
            "t1", "p1", "配管", schedule=MultiScaleSchedule(hour=ScaleInterval(480, 660))
        )

        controller.press(task, DragMode.MOVE)
        interval = controller.move(5 * 32).schedule.hour
        assert interval == ScaleInterval(480, 540)
        assert ScheduleModel.for_project(project).is_valid(interval, Scale.HOUR)


class TestResizeStart:
    """Tests for dragging the left handle."""

    def test_accepts_before_end(self, controller):
        """Test moving the start left then right."""
        controller.press_target(day_task(2, 4), "left")
        assert controller.move(0).schedule.day == ScaleInterval(1, 4)
        assert controller.move(2 * 32).schedule.day == ScaleInterval(3, 4)

    def test_rejects_at_end(self, controller):
        """Test that a start equal to the end is skipped."""
        task = day_task(2, 4)
        controller.press_target(task, "left")
        assert controller.move(3 * 32) is None
        assert controller.release() == task

    def test_rejects_before_window(self, controller):
        """Test that a start left of the first column is skipped."""
        controller.press_target(day_task(2, 4), "left")
        assert controller.move(-1) is None


class TestResizeEnd:
    """Tests for dragging the right handle."""

    def test_accepts_inside_window(self, controller):
        """Test extending the end to the last column."""
        controller.press_target(day_task(2, 4), "right")
        assert controller.move(5 * 32).schedule.day == ScaleInterval(2, 7)
        assert controller.move(32).schedule.day == ScaleInterval(2, 3)

    def test_rejects_past_window(self, controller):
        """Test that an end past the window is skipped."""
        controller.press_target(day_task(2, 4), "right")
        assert controller.move(6 * 32) is None

    def test_rejects_before_start(self, controller):
        """Test that an end not after the start is skipped."""
        controller.press_target(day_task(2, 4), "right")
        assert controller.move(0) is None

    def test_hour_scale_end(self):
        """Test resizing on the 5-minute grid."""
        controller = InteractionController.for_project(make_project(Scale.HOUR), cell_width=24)
        controller.press_target(Task("t1", "p1", "配管"), "right")
        updated = controller.move(24 * 24)
        assert updated.schedule.hour == ScaleInterval(480, 605)


class TestLifecycle:
    """Tests for gesture start and end."""

    def test_release_keeps_last_value(self, controller):
        """Test that release returns the last accepted frame."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        controller.move(3 * 32)
        controller.move(4 * 32)
        task = controller.release()

        assert task.schedule.day == ScaleInterval(5, 7)
        assert not controller.is_dragging
        assert controller.state is None

    def test_lose_capture_is_release(self, controller):
        """Test that losing capture ends the gesture."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        controller.move(0)
        assert controller.lose_capture().schedule.day == ScaleInterval(1, 3)
        assert not controller.is_dragging

    def test_release_when_idle(self, controller):
        """Test releasing with no gesture."""
        assert controller.release() is None

    def test_move_when_idle(self, controller):
        """Test that motion without a press is an error."""
        with pytest.raises(RuntimeError):
            controller.move(10)

    def test_double_press(self, controller):
        """Test that a second press during a gesture is an error."""
        controller.press(day_task(2, 4), DragMode.MOVE)
        with pytest.raises(RuntimeError):
            controller.press(day_task(2, 4), DragMode.RESIZE_END)

    def test_unknown_target(self, controller):
        """Test that unknown bar regions are rejected."""
        with pytest.raises(ValueError):
            controller.press_target(day_task(2, 4), "top")
        assert not controller.is_dragging


class TestRandomGestures:
    """Intervals stay valid under arbitrary gesture sequences."""

    @pytest.mark.parametrize("scale", list(Scale))
    def test_intervals_stay_valid(self, scale):
        """Test that every accepted frame keeps a valid, aligned interval."""
        rng = random.Random(1234)
        project = make_project(scale)
        controller = InteractionController.for_project(project, cell_width=10)
        model = ScheduleModel.for_project(project)
        width = controller.mapper.total_width(scale, project.day_window)
        task = Task("t1", "p1", "配管")

        for _ in range(50):
            controller.press(task, rng.choice(list(DragMode)))
            for _ in range(10):
                controller.move(rng.uniform(-50, width + 50))
                current = model.resolve(controller.state.task, scale)
                assert model.is_valid(current, scale)
            task = controller.release()
