"""Callables referenced from YAML macro files in the tests."""


def flux_fields(client, units, value):
    return {"value": value, "units": units, "understand_risks": "confirmed"}


def shipment_form(client, shipment_id):
    return f"shipment-{shipment_id}"


def stats_link(client, period):
    return {"text": f"Stats for {period}"}


class handlers:
    @staticmethod
    def jingle(client, note_text):
        """Jingle the jangle."""
        client.indent_note(f"note_text: [{note_text}]", 1)


NOT_CALLABLE = 42
