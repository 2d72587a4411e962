"""Quote request intake service: validates quote requests and emails them to the team."""
