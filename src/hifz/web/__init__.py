"""Web API for the hifz tracker."""
