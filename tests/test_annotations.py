"""
Tests for @key[=value] directives in comments.
"""

import pytest

from gips.annotations import AnnotationParser
from gips.parameter import Parameter, ParameterType


@pytest.fixture
def parser():
    return AnnotationParser()


def scalar(name='x'):
    return Parameter.declare(name, 1)


class TestParameterDirectives:
    """Directives that modify the open parameter."""

    def test_bounds(self, parser):
        p = scalar()
        assert parser.parse(' @min=0 @max=5', p) == ''
        assert (p.min_value, p.max_value) == (0.0, 5.0)
        assert p.description == ''
        assert parser.diagnostics == []

    def test_description_is_remainder(self, parser):
        p = scalar()
        parser.parse(' brightness @min=0 @max=4', p)
        assert p.description == 'brightness'

    def test_description_around_directives(self, parser):
        p = scalar()
        parser.parse(' scale @max=2 factor', p)
        assert p.description == 'scale factor'

    def test_character_after_directive_is_dropped(self, parser):
        p = scalar()
        parser.parse(' @min=0, gain', p)
        assert p.min_value == 0.0
        assert p.description == 'gain'

    def test_toggle_with_aliases(self, parser):
        p = scalar('sign')
        parser.parse(' invert chrominance @toggle @off=1 @on=-1', p)
        assert p.type is ParameterType.TOGGLE
        assert (p.min_value, p.max_value) == (1.0, -1.0)
        assert p.description == 'invert chrominance'

    def test_switch_alias(self, parser):
        p = scalar()
        parser.parse('@switch', p)
        assert p.type is ParameterType.TOGGLE

    def test_unit(self, parser):
        p = scalar()
        parser.parse('@unit=px', p)
        assert p.unit == 'px'

    def test_keys_and_values_fold_case(self, parser):
        p = scalar()
        parser.parse('@MIN=2 @Unit=PX', p)
        assert p.min_value == 2.0
        assert p.unit == 'px'

    @pytest.mark.parametrize('width, ptype', [(3, ParameterType.RGB), (4, ParameterType.RGBA)])
    def test_color(self, parser, width, ptype):
        p = Parameter.declare('c', width)
        parser.parse('@color', p)
        assert p.type is ptype
        assert parser.diagnostics == []

    def test_color_on_scalar(self, parser):
        p = scalar('c')
        parser.parse('@color', p)
        assert p.type is ParameterType.SCALAR
        assert parser.diagnostics == [
            "(GIPS) '@color' format is incompatible with uniform data type of parameter 'c'"
        ]

    def test_toggle_on_vec3(self, parser):
        p = Parameter.declare('v', 3)
        parser.parse('@toggle', p)
        assert p.type is ParameterType.VEC3
        assert len(parser.diagnostics) == 1
        assert 'incompatible' in parser.diagnostics[0]

    def test_doc_comment_marker(self, parser):
        p = scalar()
        parser.parse('! gain @min=1', p)
        assert p.description == 'gain'
        assert p.min_value == 1.0

    def test_at_inside_word_is_text(self, parser):
        p = scalar()
        parser.parse(' ask user@example.org', p)
        assert p.description == 'ask user@example.org'
        assert parser.diagnostics == []


class TestDiagnostics:
    """Malformed directives are reported and skipped."""

    def test_unknown_key(self, parser):
        parser.parse('@bogus @min=1', scalar())
        assert parser.diagnostics == ["(GIPS) unrecognized token '@bogus'"]

    def test_parameter_directive_without_parameter(self, parser):
        parser.parse('@min=1')
        assert parser.diagnostics == ["(GIPS) '@min' token is only valid inside a parameter comment"]

    def test_missing_value(self, parser):
        p = scalar()
        parser.parse('@unit', p)
        assert p.unit == ''
        assert parser.diagnostics == ["(GIPS) '@unit' token requires a value"]

    def test_non_numeric_value(self, parser):
        p = scalar()
        parser.parse('@max=big', p)
        assert p.max_value == 1.0
        assert parser.diagnostics == ["(GIPS) '@max' token requires a numeric value"]

    def test_scanning_continues(self, parser):
        p = scalar()
        parser.parse('@what @max=3', p)
        assert p.max_value == 3.0
        assert len(parser.diagnostics) == 1


class TestPassDirectives:
    """Coordinate mapping and filter modes."""

    def test_defaults(self, parser):
        assert parser.pending.coord == 'pixel'
        assert parser.pending.filter is True

    @pytest.mark.parametrize('value, mode', [
        ('pixel', 'pixel'),
        ('none', 'none'),
        ('relative', 'relative'),
        ('rel', 'relative'),
    ])
    def test_coord(self, parser, value, mode):
        parser.parse(f' @coord={value}')
        assert parser.pending.coord == mode

    def test_coord_aliases(self, parser):
        parser.parse('@map=rel')
        assert parser.pending.coord == 'relative'
        parser.parse('@coords=none')
        assert parser.pending.coord == 'none'

    @pytest.mark.parametrize('value, linear', [
        ('1', True), ('on', True), ('linear', True), ('bilinear', True),
        ('0', False), ('off', False), ('nearest', False), ('point', False),
    ])
    def test_filter(self, parser, value, linear):
        parser.pending.filter = not linear
        parser.parse(f'@filt={value}')
        assert parser.pending.filter is linear

    def test_unknown_modes(self, parser):
        parser.parse('@coord=polar @filter=cubic')
        assert parser.pending.coord == 'pixel'
        assert parser.pending.filter is True
        assert parser.diagnostics == [
            "(GIPS) unrecognized coordinate mapping mode 'polar'",
            "(GIPS) unrecognized texture filtering mode 'cubic'",
        ]

    def test_pass_directive_inside_parameter_comment(self, parser):
        p = scalar()
        parser.parse('amount @coord=rel', p)
        assert parser.pending.coord == 'relative'
        assert p.description == 'amount'
