"""
Tests for the carve orchestrator.

Organized into:
  1. The axis-selection state machine
  2. Carving to a target size (dimensions, identity, seam consistency)
  3. Rejected requests (upscale, degenerate targets, bad options)
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamcarve.carving import (CarvePlan, CarveState, SeamCarver, carve_image,
                               carve_seams, target_size)
from seamcarve.errors import DegenerateImage, UpscaleRequested
from seamcarve.seam import ForwardEnergySeamFinder, remove_seam
from seamcarve.view import ImageView

from conftest import make_edge_image, make_random_image


class RecordingCarver(SeamCarver):
    """SeamCarver that remembers the direction of every seam it removes."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.directions = []

    def carve_once(self, image, direction):
        self.directions.append(direction)
        return super().carve_once(image, direction)


# ---------------------------------------------------------------------------
# 1. State machine
# ---------------------------------------------------------------------------

class TestCarvePlan:
    def test_alternates_while_both_shrink(self):
        plan = CarvePlan(3, 3)
        assert plan.update(5, 5) is CarveState.BOTH_AXES_SHRINKING
        assert plan.next_direction() == 'vertical'
        assert plan.update(4, 5) is CarveState.BOTH_AXES_SHRINKING
        assert plan.next_direction() == 'horizontal'
        assert plan.update(4, 4) is CarveState.BOTH_AXES_SHRINKING
        assert plan.next_direction() == 'vertical'

    def test_switches_to_single_axis(self):
        plan = CarvePlan(3, 3)
        plan.update(4, 5)
        plan.next_direction()
        assert plan.update(3, 5) is CarveState.SINGLE_AXIS_SHRINKING
        assert plan.next_direction() == 'horizontal'
        assert plan.update(3, 4) is CarveState.SINGLE_AXIS_SHRINKING
        assert plan.next_direction() == 'horizontal'
        assert plan.update(3, 3) is CarveState.DONE
        assert plan.next_direction() is None

    def test_initial_single_axis(self):
        plan = CarvePlan(5, 2)
        assert plan.update(5, 4) is CarveState.SINGLE_AXIS_SHRINKING
        assert plan.next_direction() == 'horizontal'

        plan = CarvePlan(2, 4)
        assert plan.update(5, 4) is CarveState.SINGLE_AXIS_SHRINKING
        assert plan.next_direction() == 'vertical'

    def test_initial_done(self):
        assert CarvePlan(5, 4).update(5, 4) is CarveState.DONE


# ---------------------------------------------------------------------------
# 2. Carving to a target size
# ---------------------------------------------------------------------------

class TestCarveImage:
    def test_reaches_target_size(self):
        image = make_random_image(12, 15)
        carved = carve_image(image, 10, 9)
        assert carved.shape == (3, 9, 10)
        assert carved.dtype == torch.uint8

    def test_seam_count(self):
        carver = SeamCarver(make_random_image(12, 15))
        carver.carve(10, 9)
        assert carver.seams_removed == 5 + 3

    def test_direction_order(self):
        """Width and height alternate, then the remaining axis finishes alone."""
        carver = RecordingCarver(make_random_image(6, 6))
        carved = carver.carve(4, 3)
        assert carved.dimensions() == (4, 3)
        assert carver.directions == ['vertical', 'horizontal', 'vertical',
                                     'horizontal', 'horizontal']

    def test_same_size_is_a_copy(self):
        """Targets equal to the current size remove no seams."""
        image = make_random_image(7, 9)
        carver = SeamCarver(image)
        result = carver.carve(9, 7)
        assert carver.seams_removed == 0
        assert torch.equal(result.to_tensor(), image)
        assert result.samples.data_ptr() != carver.image.samples.data_ptr()

    def test_identity_through_function(self):
        image = make_random_image(7, 9, channels=0)
        result = carve_image(image, 9, 7)
        assert torch.equal(result, image)

    def test_one_column_matches_seam_removal(self):
        """Carving one column deletes seam[r] from every row r."""
        image = make_random_image(10, 12)
        view = ImageView.from_tensor(image)
        seam = ForwardEnergySeamFinder(view).find_vertical_seam()

        carved = carve_image(image, 11, 10)
        assert carved.shape == (3, 10, 11)
        assert torch.equal(carved, remove_seam(image, seam))
        for r, s in enumerate(seam.tolist()):
            row = image[:, r, :]
            expected = torch.cat([row[:, :s], row[:, s + 1:]], dim=1)
            assert torch.equal(carved[:, r, :], expected)

    def test_input_not_modified(self):
        image = make_random_image(8, 8)
        before = image.clone()
        carve_image(image, 5, 6)
        assert torch.equal(image, before)

    @pytest.mark.parametrize("energy", ['forward', 'base'])
    @pytest.mark.parametrize("distance", ['rgb', 'luma'])
    def test_energy_and_distance_options(self, energy, distance):
        carved = carve_image(make_random_image(9, 11), 8, 7, energy=energy, distance=distance)
        assert carved.shape == (3, 7, 8)

    @pytest.mark.parametrize("energy", ['forward', 'base'])
    def test_workers_do_not_change_result(self, energy):
        image = make_random_image(10, 14)
        single = carve_image(image, 10, 8, energy=energy, workers=1)
        assert torch.equal(carve_image(image, 10, 8, energy=energy, workers=4), single)

    def test_grayscale_stays_2d(self):
        carved = carve_image(make_random_image(8, 9, channels=0), 6, 6)
        assert carved.shape == (6, 6)

    def test_image_view_in_view_out(self):
        view = ImageView.from_tensor(make_random_image(6, 7))
        carved = carve_image(view, 5, 5)
        assert isinstance(carved, ImageView)
        assert carved.dimensions() == (5, 5)

    def test_edge_survives_carving(self):
        """Seams route around a strong vertical edge, so it is preserved."""
        carved = carve_image(make_edge_image(30, 40, edge_col=20), 35, 30)
        values = carved[0, 15, :].to(torch.int64)
        assert (values[1:] - values[:-1]).abs().max() > 100

    def test_carve_to_single_column(self):
        carved = carve_image(make_random_image(4, 5), 1, 4)
        assert carved.shape == (3, 4, 1)


class TestCarveSeams:
    def test_vertical(self):
        image = make_random_image(25, 40)
        for n in [1, 5, 15]:
            assert carve_seams(image, n, direction='vertical').shape == (3, 25, 40 - n)

    def test_horizontal(self):
        assert carve_seams(make_random_image(20, 10), 4, direction='horizontal').shape == (3, 16, 10)

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            carve_seams(make_random_image(5, 5), 1, direction='sideways')


# ---------------------------------------------------------------------------
# 3. Rejected requests
# ---------------------------------------------------------------------------

class TestRejectedCarves:
    def test_wider_target_is_upscale(self):
        image = make_random_image(6, 8)
        with pytest.raises(UpscaleRequested):
            carve_image(image, 9, 6)

    def test_taller_target_is_upscale(self):
        image = make_random_image(6, 8)
        with pytest.raises(UpscaleRequested):
            carve_image(image, 8, 7)

    def test_upscale_removes_nothing(self):
        carver = RecordingCarver(make_random_image(6, 8))
        with pytest.raises(UpscaleRequested):
            carver.carve(4, 7)
        assert carver.directions == []

    def test_zero_target_is_degenerate(self):
        with pytest.raises(DegenerateImage):
            carve_image(make_random_image(6, 8), 0, 6)

    def test_invalid_energy(self):
        with pytest.raises(ValueError):
            SeamCarver(make_random_image(4, 4), energy='backward')

    def test_invalid_distance(self):
        with pytest.raises(ValueError):
            SeamCarver(make_random_image(4, 4), distance='cosine')

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            SeamCarver(make_random_image(4, 4), workers=0)


class TestTargetSize:
    def test_fills_missing_dimensions(self):
        image = make_random_image(6, 8)
        assert target_size(image) == (8, 6)
        assert target_size(image, width=5) == (5, 6)
        assert target_size(ImageView.from_tensor(image), height=2) == (8, 2)
