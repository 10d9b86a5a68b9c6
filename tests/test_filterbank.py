"""Tests for filterbank construction."""

import math

import pytest
import torch

from torchcqt import fft
from torchcqt.filterbank import KERNEL_DTYPE, build_filterbank, derive_bin, kernel_row
from torchcqt.validation import BuildFFTError, FFTFailure, InvalidParameterError


@pytest.fixture
def bank(small_params, cache):
    return build_filterbank(small_params, cache=cache, num_workers=1)


class TestLayout:
    """Test shapes and per-bin derivations."""

    def test_kernel_shape_and_dtype(self, bank, small_params):
        assert small_params.n_bins == 64
        assert bank.kernel.shape == (64, 1024)
        assert bank.kernel.dtype == KERNEL_DTYPE
        assert bank.n_bins == 64
        assert bank.window_length == 1024

    def test_bins_are_in_order(self, bank):
        assert [spec.index for spec in bank.bins] == list(range(bank.n_bins))

    def test_center_frequencies(self, bank, small_params):
        torch.testing.assert_close(bank.center_frequencies, small_params.center_frequencies())
        for spec in bank.bins:
            assert spec.center_frequency == small_params.center_frequency(spec.index)

    def test_window_lengths(self, bank, small_params):
        q = small_params.q_factor
        for spec in bank.bins:
            ideal = math.ceil(q * small_params.sampling_rate / spec.center_frequency)
            assert spec.window_length == min(ideal, 1024)
            assert spec.offset == (1024 - spec.window_length) // 2
            assert spec.complex_window.shape == (spec.window_length,)
        assert bank.bins[0].window_length == 1024
        assert bank.bins[-1].window_length < bank.bins[0].window_length

    def test_q_factor_and_bandwidth(self, bank, small_params):
        assert bank.q_factor == small_params.q_factor
        spec = bank.bins[10]
        assert spec.bandwidth == pytest.approx(spec.center_frequency / spec.q_factor)

    def test_repr(self, bank):
        assert repr(bank) == "Filterbank(n_bins=64, window_length=1024, norm='l1')"


class TestNormalization:
    """Test the atom gains."""

    def test_l1_atoms_have_unit_sum(self, bank):
        for spec in bank.bins:
            assert float(spec.complex_window.abs().sum()) == pytest.approx(1.0)

    def test_l2_atoms_have_unit_energy(self, small_params, cache):
        bank = build_filterbank(small_params, norm="l2", cache=cache, num_workers=1)
        assert bank.norm == "l2"
        for spec in bank.bins:
            assert float((spec.complex_window.abs() ** 2).sum()) == pytest.approx(1.0)

    def test_unknown_norm(self, small_params, cache):
        with pytest.raises(InvalidParameterError):
            build_filterbank(small_params, norm="max", cache=cache)  # type: ignore[arg-type]


class TestKernel:
    """Test the frequency-domain kernel against the time-domain atoms."""

    def test_spectral_projection_equals_time_domain_inner_product(self, bank):
        generator = torch.Generator().manual_seed(0)
        frame = torch.randn(1024, dtype=torch.float64, generator=generator)

        atoms = bank.time_kernel()
        expected = (frame.to(torch.complex128) * atoms.conj()).sum(dim=-1)
        actual = torch.fft.fft(frame) @ bank.kernel.to(torch.complex128).T

        torch.testing.assert_close(actual, expected, rtol=1e-4, atol=1e-5)

    def test_time_kernel(self, bank):
        atoms = bank.time_kernel()
        assert atoms.shape == (64, 1024)
        assert atoms.dtype == torch.complex128
        spec = bank.bins[-1]
        assert bool((atoms[spec.index, : spec.offset] == 0).all())
        torch.testing.assert_close(
            atoms[spec.index, spec.offset : spec.offset + spec.window_length],
            spec.complex_window,
        )

    def test_atom_oscillates_at_center_frequency(self, small_params, cache):
        spec = derive_bin(small_params, 20, cache=cache)
        n = torch.arange(spec.window_length, dtype=torch.float64)
        expected_phase = 2 * math.pi * spec.center_frequency * (spec.offset + n) / 16000.0
        taper = fft.hann(spec.window_length) * spec.norm_factor
        expected = torch.polar(taper, expected_phase)
        torch.testing.assert_close(spec.complex_window, expected)

    def test_kernel_row_matches_bank(self, bank):
        spec = bank.bins[5]
        assert torch.equal(kernel_row(spec, 1024), bank.kernel[5])

    def test_cosine_on_bin_center(self, bank):
        spec = bank.bins[40]
        n = torch.arange(1024, dtype=torch.float64)
        frame = torch.cos(2 * math.pi * spec.center_frequency * n / 16000.0)
        coefficients = (torch.fft.fft(frame) @ bank.kernel.to(torch.complex128).T).abs()
        assert int(coefficients.argmax()) == 40
        assert float(coefficients[40]) == pytest.approx(0.5, rel=0.02)


class TestBuild:
    """Test parallel construction and failures."""

    def test_parallel_build_is_identical(self, small_params, cache):
        serial = build_filterbank(small_params, cache=cache, num_workers=1)
        parallel = build_filterbank(small_params, cache=cache, num_workers=4)
        assert torch.equal(serial.kernel, parallel.kernel)
        assert [b.window_length for b in serial.bins] == [b.window_length for b in parallel.bins]

    def test_fft_failure_becomes_build_error(self, small_params, cache, monkeypatch):
        def broken(buffer, size):
            raise FFTFailure("backend unavailable", size=size)

        monkeypatch.setattr(fft, "transform", broken)
        with pytest.raises(BuildFFTError) as exc_info:
            build_filterbank(small_params, cache=cache, num_workers=1)
        assert exc_info.value.bin_index == 0
        assert isinstance(exc_info.value.__cause__, FFTFailure)

    def test_fft_failure_in_parallel_build(self, small_params, cache, monkeypatch):
        def broken(buffer, size):
            raise FFTFailure("injected", size=size)

        monkeypatch.setattr(fft, "transform", broken)
        with pytest.raises(BuildFFTError) as exc_info:
            build_filterbank(small_params, cache=cache, num_workers=4)
        assert "injected" in str(exc_info.value)
