import streamlit as st

from utils.config import load_valuation_config
from utils.ui_layout import init_page_layout

render_layout = init_page_layout(
    page_title="Home",
    main_title="Acron calculator guide",
    description="How the profitability figures are built, plus quick navigation links.",
)
render_layout(load_valuation_config())

st.markdown(
    """
## Welcome
Estimate the annual value a battery storage system creates for a building owner.

### Run the calculator
1) Open the **Calculator** page and set battery power (and capacity when the deployment sizes estimates by kWh).
2) Enter flexibility market prices, or review the reference installation when the deployment scales from one.
3) Switch solar utilization on or off and adjust production, electricity price and self-consumption.
4) Decide whether to include the peak shaving and spot arbitrage **estimates**.
5) Enter the investment to see payback time and ROI, then download the PDF report.

### How the figures are built
- **Flexibility market:** availability income accrues per hour over 5 days a week, 4 weeks a month and 6 winter months; summer earns a share of winter. Activation income is paid per activation.
- **Solar utilization:** extra self-consumed solar energy (with minus without battery) valued at the electricity price.
- **Peak shaving / spot arbitrage:** typical per-kW rates, not verified for the site. They are labelled ESTIMATE.
- **Acron fee:** a fixed share of the gross value; the rest is the net value to the building owner.

### Sensitivity
- The **Sensitivity** page sweeps one parameter across a range and shows a tornado chart of the main levers.
- Custom sweep values accept decimal commas and spaces as thousand separators, separated by `;` or new lines.

### Reading the results
- Payback shows *Not applicable* when no investment is entered and *Does not pay back* when the net value is zero or negative.
- Shares of gross value show `-` when the gross value is zero.
- Actual income varies with grid conditions, market situation and battery availability. Contact Acron for a project assessment.
    """
)
