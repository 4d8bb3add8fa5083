"""
jeffy_ops.jobs — Back-office jobs run from the `jeffy` CLI or a scheduler.

Each job takes an optional Supabase client (the service-role singleton
by default) so it can be driven from tests with a mock.

    from jeffy_ops.jobs import financials, promos

    financials.calculate_all("month")
    promos.expire_promos()
"""
