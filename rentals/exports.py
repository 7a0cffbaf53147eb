"""
CSV / Excel exports and payment receipts
========================================

Report rows are flattened to plain dicts here and written with pandas.
"""

from io import BytesIO

import pandas as pd
from django.conf import settings

MONTHLY_COLUMNS = ['Month', 'Transactions', 'Amount']
DEBTOR_COLUMNS = ['Name', 'Unit', 'Arrears']
PAYMENT_COLUMNS = ['Date', 'Tenant', 'Unit', 'Property', 'Amount', 'Method']

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def monthly_report_rows(monthly):
    return [
        {'Month': row.label, 'Transactions': row.transaction_count, 'Amount': row.total_amount}
        for row in monthly
    ]


def debtor_rows(debtors):
    return [
        {'Name': entry.name, 'Unit': entry.unit_number or 'N/A', 'Arrears': entry.arrears}
        for entry in debtors
    ]


def payment_rows(payments):
    """Flatten Payment model instances (tenant may have vacated)."""
    rows = []
    for payment in payments:
        tenant = payment.tenant
        rows.append({
            'Date': payment.payment_date.strftime('%Y-%m-%d'),
            'Tenant': tenant.name if tenant else '',
            'Unit': tenant.unit.unit_number if tenant else '',
            'Property': payment.property.name,
            'Amount': payment.amount,
            'Method': payment.get_method_display(),
        })
    return rows


def to_csv(rows, columns):
    """Header row of ``columns`` followed by one line per row."""
    df = pd.DataFrame(rows, columns=columns)
    return df.to_csv(index=False, lineterminator='\n')


def financial_workbook(summary, monthly, debtors, payments):
    """Build the .xlsx financial report and return its bytes."""
    summary_df = pd.DataFrame(
        [
            ('Total Income', float(summary.total_income)),
            ('Total Arrears', float(summary.total_arrears)),
            ('Occupancy (%)', summary.occupancy_percent),
            ('Occupied Units', summary.occupied_count),
            ('Total Units', summary.unit_count),
        ],
        columns=['Metric', 'Value'],
    )
    if summary.commission is not None:
        summary_df.loc[len(summary_df)] = ['Agency Commission', float(summary.commission)]

    monthly_df = pd.DataFrame(monthly_report_rows(monthly), columns=MONTHLY_COLUMNS)
    debtors_df = pd.DataFrame(debtor_rows(debtors), columns=DEBTOR_COLUMNS)
    payments_df = pd.DataFrame(payment_rows(payments), columns=PAYMENT_COLUMNS)
    for df, column in ((monthly_df, 'Amount'), (debtors_df, 'Arrears'), (payments_df, 'Amount')):
        df[column] = df[column].astype(float)

    output = BytesIO()
    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        summary_df.to_excel(writer, sheet_name='Summary', index=False)
        monthly_df.to_excel(writer, sheet_name='Monthly', index=False)
        debtors_df.to_excel(writer, sheet_name='Arrears', index=False)
        payments_df.to_excel(writer, sheet_name='Payments', index=False)

        if len(monthly_df):
            workbook = writer.book
            chart = workbook.add_chart({'type': 'column'})
            chart.add_series({
                'name': 'Collected',
                'categories': f"=Monthly!$A$2:$A${len(monthly_df) + 1}",
                'values': f"=Monthly!$C$2:$C${len(monthly_df) + 1}",
            })
            writer.sheets['Monthly'].insert_chart('E2', chart)

    output.seek(0)
    return output.getvalue()


def build_receipt(payment):
    tenant = payment.tenant
    return {
        'business_name': settings.KEJA_BUSINESS_NAME,
        'title': 'Official Rent Receipt',
        'receipt_number': payment.pk,
        'date': payment.payment_date,
        'tenant': tenant.name if tenant else None,
        'phone': tenant.phone if tenant else None,
        'unit': tenant.unit.unit_number if tenant else None,
        'property': payment.property.name,
        'amount': payment.amount,
        'currency': settings.KEJA_CURRENCY,
        'method': payment.get_method_display(),
    }
