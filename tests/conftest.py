"""Shared feature sources and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from featuretrack.document.parser import parse_feature_string
from featuretrack.document.registry import DocumentRegistry

OUTLINE_URI = "classpath:io/cucumber/jupiter/engine/feature-with-outline.feature"

# Line numbers matter: the scenario is on line 5, the outline on line 11,
# its examples blocks on lines 16 and 22 with rows on 18-19 and 24-25.
OUTLINE_FEATURE = """\
@FeatureTag
Feature: A feature with scenario outlines

  @ScenarioTag
  Scenario: A scenario
    Given a scenario
    When it is executed
    Then nothing else happens

  @ScenarioOutlineTag
  Scenario Outline: A scenario outline with <value>
    Given an outline with <value>
    Then it runs

    @Example1Tag
    Examples:
      | value |
      | A     |
      | B     |

    @Example2Tag
    Examples: Second block
      | value |
      | C     |
      | D     |
"""

LOGIN_URI = "file:///work/features/login.feature"

LOGIN_FEATURE = """\
Feature: Login

  Scenario: Valid login
    Given a registered user
    When they log in
    Then they see the dashboard

  Scenario:
    Given nobody bothered to name this
"""

BILLING_URI = "file:///work/features/billing.feature"

BILLING_FEATURE = """\
Feature: Billing

  Scenario: Pay invoice
    Given an open invoice
"""

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Return an instant *seconds* after a fixed start time."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture()
def outline_document():
    return parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI)


@pytest.fixture()
def registry() -> DocumentRegistry:
    """Registry holding the outline, login and billing features."""
    registry = DocumentRegistry()
    registry.add(parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI))
    registry.add(parse_feature_string(LOGIN_FEATURE, uri=LOGIN_URI))
    registry.add(parse_feature_string(BILLING_FEATURE, uri=BILLING_URI))
    return registry
